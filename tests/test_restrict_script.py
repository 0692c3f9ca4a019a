# tests/test_restrict_script.py
"""Tests for the moderation command-line script."""

import pytest
from sqlalchemy.orm import sessionmaker

from parley_stage.core.errors import NotFoundError
from parley_stage.scripts import restrict
from tests.factories import as_identity, make_identity, reload_identity

ADDRESS = "192.0.2.70"


def test_apply_restriction_blocks_verify(db_session, client) -> None:
    make_identity(db_session, ADDRESS)

    summary = restrict.apply_restriction(db_session, ADDRESS, message="Flooding", lift=False)

    assert summary == f"Restricted {ADDRESS}: Flooding"
    r = client.get("/api/v1/verify", headers=as_identity(ADDRESS))
    assert r.status_code == 403
    assert r.json()["detail"] == "Flooding"


def test_apply_restriction_lift(db_session) -> None:
    make_identity(db_session, ADDRESS, restricted=True, restricted_message="Flooding")

    restrict.apply_restriction(db_session, ADDRESS, message="", lift=True)

    assert reload_identity(db_session, ADDRESS).restricted is False


def test_apply_restriction_lift_unknown(db_session) -> None:
    with pytest.raises(NotFoundError):
        restrict.apply_restriction(db_session, ADDRESS, message="", lift=True)


def test_main_uses_default_message(db_session, engine, monkeypatch, capsys) -> None:
    monkeypatch.setattr(restrict, "SessionLocal", sessionmaker(bind=engine))

    assert restrict.main([ADDRESS]) == 0

    assert reload_identity(db_session, ADDRESS).restricted_message == restrict.DEFAULT_MESSAGE
    assert ADDRESS in capsys.readouterr().out


def test_main_lift_unknown_returns_error(engine, monkeypatch, capsys) -> None:
    monkeypatch.setattr(restrict, "SessionLocal", sessionmaker(bind=engine))

    assert restrict.main([ADDRESS, "--lift"]) == 1
    assert ADDRESS in capsys.readouterr().err
