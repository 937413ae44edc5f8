"""
Concurrent reserve attempts on one stake.

Uses a file-backed SQLite database so each thread gets its own connection and
the database, not Python, arbitrates the race.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from sqlmodel import Session, SQLModel, create_engine, select

from app.database import configure_sqlite
from app.models.reservation import Reservation
from app.models.stake import StakeStatus
from app.services.reservation_request import OutcomeKind, submit_reservation
from app.services.reservation_service import reserve_stake
from app.services.stake_lifecycle import StakeConflictError
from tests.factories import make_tournament, stake_by_number

ATTEMPTS = 8


def _file_engine(tmp_path):
    engine = configure_sqlite(
        create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False}),
        busy_timeout_ms=30000,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def test_concurrent_reserve_exactly_one_wins(tmp_path):
    engine = _file_engine(tmp_path)
    with Session(engine) as session:
        _, bird_types = make_tournament(session)
        stake_id = stake_by_number(session, bird_types["Coleiro"].id, 7).id

    barrier = threading.Barrier(ATTEMPTS)

    def attempt(i):
        with Session(engine) as session:
            barrier.wait()
            try:
                reserve_stake(session, stake_id, f"Reservant {i}", f"+1555000{i}")
                return "won"
            except StakeConflictError:
                return "conflict"

    with ThreadPoolExecutor(max_workers=ATTEMPTS) as pool:
        results = list(pool.map(attempt, range(ATTEMPTS)))

    assert results.count("won") == 1
    assert results.count("conflict") == ATTEMPTS - 1

    with Session(engine) as session:
        stake = stake_by_number(session, bird_types["Coleiro"].id, 7)
        assert stake.status == StakeStatus.pending
        reservations = session.exec(select(Reservation).where(Reservation.stake_id == stake_id)).all()
        assert len(reservations) == 1
        assert reservations[0].customer_name == stake.reservant_name
    engine.dispose()


def test_concurrent_requests_report_conflict_not_error(tmp_path):
    engine = _file_engine(tmp_path)
    with Session(engine) as session:
        _, bird_types = make_tournament(session)
        stake_id = stake_by_number(session, bird_types["Coleiro"].id, 1).id

    barrier = threading.Barrier(ATTEMPTS)

    def attempt(i):
        with Session(engine) as session:
            barrier.wait()
            return submit_reservation(session, stake_id, f"Reservant {i}", "+1555").kind

    with ThreadPoolExecutor(max_workers=ATTEMPTS) as pool:
        kinds = list(pool.map(attempt, range(ATTEMPTS)))

    assert kinds.count(OutcomeKind.success) == 1
    assert kinds.count(OutcomeKind.conflict) == ATTEMPTS - 1
    engine.dispose()
