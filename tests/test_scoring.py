import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from nbhwc_api.core.database import SessionLocal, engine
from nbhwc_api.core.errors import TransientStoreError, ValidationError
from nbhwc_api.models.orm import Base, User, UserMastery, UserMasteryHistory, UserStats
from nbhwc_api.services.scoring import next_mastery, points_for, round_half_up, submit_results

@pytest.fixture
def user_id(db):
    u = User(full_name="Quiz Taker", email="taker@example.com", password_hash="x")
    db.add(u); db.flush()
    db.add(UserStats(user_id=u.id, points=0))
    db.add(UserMastery(user_id=u.id, topic_name="SMART Goals", mastery_score=90))
    db.commit()
    return u.id

@pytest.mark.parametrize("correct,total,expected", [
    (0, 5, 0), (3, 5, 30), (4, 5, 40), (5, 5, 100), (1, 1, 60), (10, 12, 100),
])
def test_points(correct, total, expected):
    assert points_for(correct, total) == expected

@pytest.mark.parametrize("current,score,expected", [
    (0, 0, 0), (0, 100, 20), (90, 100, 100), (50, 50, 60), (99, 10, 100), (0, 12.5, 3), (37, 62.5, 50),
])
def test_next_mastery(current, score, expected):
    assert next_mastery(current, score) == expected

def test_mastery_never_decreases():
    for current in range(0, 101, 7):
        for score in (0, 10, 33.3, 50, 99.9, 100):
            assert next_mastery(current, score) >= current
            assert next_mastery(current, score) <= 100

def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(12.5) == 13
    assert round_half_up(12.49) == 12

def test_perfect_run_on_high_mastery(db, user_id):
    result = submit_results(db, user_id, "SMART Goals", 5, 5)
    assert result.score == 100
    assert result.points_awarded == 100
    assert result.mastery_score == 100

    check = SessionLocal()
    assert check.get(UserStats, user_id).points == 100
    history = check.scalars(select(UserMasteryHistory).where(UserMasteryHistory.user_id == user_id)).all()
    assert [h.mastery_score for h in history] == [100]
    check.close()

def test_repeated_perfect_runs_converge_to_100(db, user_id):
    scores = [submit_results(db, user_id, "Coaching Process", 4, 4).mastery_score for _ in range(7)]
    assert scores == [20, 40, 60, 80, 100, 100, 100]
    assert db.get(UserStats, user_id).points == 7 * 90

def test_missing_rows_are_created(db):
    u = User(full_name="New", email="new@example.com", password_hash="x")
    db.add(u); db.commit()
    result = submit_results(db, u.id, "HIPAA Basics", 2, 4)
    assert result.mastery_score == 10
    assert db.get(UserStats, u.id).points == 20

@pytest.mark.parametrize("correct,total", [(0, 0), (-1, 3), (4, 3), (1, -2)])
def test_invalid_counts_write_nothing(db, user_id, correct, total):
    with pytest.raises(ValidationError):
        submit_results(db, user_id, "SMART Goals", correct, total)
    assert db.get(UserStats, user_id).points == 0
    assert db.scalars(select(UserMasteryHistory)).all() == []

def test_blank_topic_rejected(db, user_id):
    with pytest.raises(ValidationError):
        submit_results(db, user_id, "  ", 1, 2)

def test_store_failure_rolls_back_everything(db, user_id):
    UserMasteryHistory.__table__.drop(engine)
    with pytest.raises(TransientStoreError):
        submit_results(db, user_id, "SMART Goals", 3, 3)
    check = SessionLocal()
    assert check.get(UserStats, user_id).points == 0
    assert check.scalar(select(UserMastery.mastery_score).where(UserMastery.user_id == user_id)) == 90
    check.close()

def test_overlapping_submissions_keep_both_awards(tmp_path):
    file_engine = create_engine(f"sqlite:///{tmp_path / 'overlap.db'}")
    Base.metadata.create_all(file_engine)
    Session = sessionmaker(bind=file_engine, expire_on_commit=False)
    with Session() as setup:
        u = User(full_name="Two Tabs", email="tabs@example.com", password_hash="x")
        setup.add(u); setup.flush()
        setup.add(UserStats(user_id=u.id, points=0))
        setup.commit()
        uid = u.id

    first, second = Session(), Session()
    try:
        assert first.get(UserStats, uid).points == 0
        submit_results(second, uid, "SMART Goals", 5, 5)
        submit_results(first, uid, "SMART Goals", 1, 5)
    finally:
        first.close(); second.close()

    with Session() as check:
        assert check.get(UserStats, uid).points == 110
    file_engine.dispose()
