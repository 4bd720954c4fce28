import asyncio
import itertools
import threading

import pytest
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from core.exceptions import NotFoundError, UnauthenticatedError
from database import Base, build_engine, build_session_factory, init_models, insert_or_ignore
from models import User, Video, VideoLike, Polarity
from services.reaction_service import ReactionStore


def reaction_rows(db, user_id, video_id):
    return db.query(func.count(VideoLike.id)).filter(
        VideoLike.user_id == user_id,
        VideoLike.video_id == video_id
    ).scalar()


def expected_state(actions):
    """Reference model: repeating the held reaction clears it, anything else sets it."""
    state = None
    for action in actions:
        state = None if action == state else action
    return state


@pytest.mark.asyncio
async def test_like_from_no_reaction_creates_row(db, create_user, create_video):
    user = create_user()
    video = create_video()
    store = ReactionStore(db)

    state = await store.like(user.id, video.id)

    assert state is Polarity.LIKE
    assert await store.query_reaction(user.id, video.id) is Polarity.LIKE
    assert reaction_rows(db, user.id, video.id) == 1


@pytest.mark.asyncio
async def test_repeating_like_clears_it_and_third_like_restores_it(db, create_user, create_video):
    user = create_user()
    video = create_video()
    store = ReactionStore(db)

    await store.like(user.id, video.id)
    assert await store.like(user.id, video.id) is None
    assert await store.query_reaction(user.id, video.id) is None
    assert reaction_rows(db, user.id, video.id) == 0

    assert await store.like(user.id, video.id) is Polarity.LIKE
    assert reaction_rows(db, user.id, video.id) == 1


@pytest.mark.asyncio
async def test_opposite_reaction_flips_row_in_place(db, create_user, create_video):
    user = create_user()
    video = create_video()
    store = ReactionStore(db)

    await store.dislike(user.id, video.id)
    original_id = db.query(VideoLike.id).filter(VideoLike.user_id == user.id).scalar()

    assert await store.like(user.id, video.id) is Polarity.LIKE

    row = db.query(VideoLike.id, VideoLike.polarity).filter(VideoLike.user_id == user.id).one()
    assert row.id == original_id
    assert row.polarity == Polarity.LIKE


@pytest.mark.asyncio
async def test_every_action_sequence_ends_in_reference_state(db, create_user, create_video):
    user = create_user()
    store = ReactionStore(db)

    for length in range(1, 5):
        for actions in itertools.product([Polarity.LIKE, Polarity.DISLIKE], repeat=length):
            video = create_video()
            for action in actions:
                await store.set_reaction(user.id, video.id, action)

            assert await store.query_reaction(user.id, video.id) == expected_state(actions), actions
            assert reaction_rows(db, user.id, video.id) <= 1, actions


@pytest.mark.asyncio
async def test_reactions_of_different_users_are_independent(db, create_user, create_video):
    alice, bob = create_user(), create_user()
    video = create_video()
    store = ReactionStore(db)

    await store.like(alice.id, video.id)
    await store.dislike(bob.id, video.id)

    assert await store.query_reaction(alice.id, video.id) is Polarity.LIKE
    assert await store.query_reaction(bob.id, video.id) is Polarity.DISLIKE
    assert await store.count_reactions(video.id) == (1, 1)


@pytest.mark.asyncio
async def test_reaction_requires_identity(db, create_video):
    video = create_video()

    with pytest.raises(UnauthenticatedError):
        await ReactionStore(db).like(None, video.id)


@pytest.mark.asyncio
async def test_reaction_on_missing_video_is_not_found(db, create_user):
    user = create_user()

    with pytest.raises(NotFoundError) as exc_info:
        await ReactionStore(db).dislike(user.id, 999)

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail["kind"] == "NotFound"


@pytest.mark.asyncio
async def test_toggle_applies_on_top_of_row_inserted_by_another_request(db, create_user, create_video):
    """Two first-likes racing: the second one must see the first one's row, not add another."""
    user = create_user()
    video = create_video()

    # The "winning" request's row, written outside ReactionStore
    db.add(VideoLike(user_id=user.id, video_id=video.id, polarity=int(Polarity.LIKE)))
    db.commit()

    state = await ReactionStore(db).like(user.id, video.id)

    assert state is None
    assert reaction_rows(db, user.id, video.id) == 0


def test_insert_or_ignore_reports_whether_it_inserted(db, create_user, create_video):
    user = create_user()
    video = create_video()
    values = {"user_id": user.id, "video_id": video.id, "polarity": 1}

    assert insert_or_ignore(db, VideoLike, values, ("user_id", "video_id")) is True
    assert insert_or_ignore(db, VideoLike, dict(values, polarity=-1), ("user_id", "video_id")) is False
    db.commit()

    assert db.query(VideoLike.polarity).filter(VideoLike.user_id == user.id).scalar() == 1


def test_store_rejects_a_second_row_for_the_same_pair(db, create_user, create_video):
    user = create_user()
    video = create_video()

    db.add(VideoLike(user_id=user.id, video_id=video.id, polarity=1))
    db.commit()
    db.add(VideoLike(user_id=user.id, video_id=video.id, polarity=-1))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


@pytest.mark.asyncio
async def test_count_reactions_counts_each_polarity(db, create_user, create_video):
    video = create_video()
    store = ReactionStore(db)
    for _ in range(3):
        await store.like(create_user().id, video.id)
    for _ in range(2):
        await store.dislike(create_user().id, video.id)

    assert await store.count_reactions(video.id) == (3, 2)
    assert await store.count_reactions(create_video().id) == (0, 0)


@pytest.mark.parametrize("workers", [20, 21])
def test_concurrent_likes_leave_at_most_one_row(tmp_path, workers):
    """Each thread has its own session; the final state follows the parity of the likes."""
    engine = build_engine(f"sqlite:///{tmp_path / 'reactions.db'}")
    init_models()
    Base.metadata.create_all(bind=engine)
    session_factory = build_session_factory(engine)

    with session_factory() as session:
        owner = User(username="owner", email="owner@example.com")
        session.add(owner)
        session.commit()
        video = Video(title="racy", url="https://cdn.example.com/racy.mp4", user_id=owner.id)
        session.add(video)
        session.commit()
        user_id, video_id = owner.id, video.id

    barrier = threading.Barrier(workers)
    errors = []

    def _like():
        session = session_factory()
        try:
            barrier.wait()
            asyncio.run(ReactionStore(session).like(user_id, video_id))
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=_like) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        with session_factory() as session:
            rows = session.query(VideoLike.polarity).filter(
                VideoLike.user_id == user_id,
                VideoLike.video_id == video_id
            ).all()
    finally:
        engine.dispose()

    assert errors == []
    assert len(rows) == workers % 2
    assert all(row.polarity == Polarity.LIKE for row in rows)
