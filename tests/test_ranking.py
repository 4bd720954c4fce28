import pytest

from core.exceptions import BadRequestError
from schemas.video import FeedKind
from services.ranking_service import RankingEngine
from services.view_service import ViewLedger


async def add_views(db, video, count):
    ledger = ViewLedger(db)
    for _ in range(count):
        await ledger.record_view(video.id)


@pytest.mark.asyncio
async def test_recent_feed_is_newest_first(db, create_video):
    oldest, middle, newest = create_video(), create_video(), create_video()

    feed = await RankingEngine(db).recent_feed()

    assert [item["id"] for item in feed] == [newest.id, middle.id, oldest.id]
    assert all(item["views"] == 0 for item in feed)
    assert all("user" in item for item in feed)


@pytest.mark.asyncio
async def test_trending_orders_by_views_and_keeps_recency_for_ties(db, create_video):
    # Created oldest to newest with 5, 20, 1 and 20 views
    videos = [create_video() for _ in range(4)]
    for video, views in zip(videos, [5, 20, 1, 20]):
        await add_views(db, video, views)
    a, b, c, d = [video.id for video in videos]

    feed = await RankingEngine(db).trending_feed()

    assert [item["id"] for item in feed] == [d, b, a, c]
    assert [item["views"] for item in feed] == [20, 20, 5, 1]


@pytest.mark.asyncio
async def test_feeds_are_empty_without_videos(db):
    engine = RankingEngine(db)

    assert await engine.recent_feed() == []
    assert await engine.trending_feed() == []


@pytest.mark.asyncio
async def test_search_matches_title_or_description_ignoring_case(db, create_video):
    in_title = create_video(title="Learning FastAPI", description="web stuff")
    in_description = create_video(title="Cooking", description="a fastapi-free pasta recipe")
    create_video(title="Gardening", description="tomatoes")

    feed = await RankingEngine(db).search_feed("FASTAPI")

    assert [item["id"] for item in feed] == [in_title.id, in_description.id]


@pytest.mark.asyncio
async def test_search_keeps_storage_order_not_views(db, create_video):
    first = create_video(title="cats one")
    second = create_video(title="cats two")
    await add_views(db, second, 10)

    feed = await RankingEngine(db).search_feed("cats")

    assert [item["id"] for item in feed] == [first.id, second.id]
    assert [item["views"] for item in feed] == [0, 10]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(db, create_video):
    create_video(title="plain title", description=None)
    percent = create_video(title="100% organic", description=None)

    feed = await RankingEngine(db).search_feed("%")

    assert [item["id"] for item in feed] == [percent.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [None, ""])
async def test_search_requires_a_query(db, create_video, query):
    create_video()

    with pytest.raises(BadRequestError) as exc_info:
        await RankingEngine(db).search_feed(query)

    assert exc_info.value.detail["message"] == "Please enter a search query"


@pytest.mark.asyncio
async def test_whitespace_query_is_searched_literally(db, create_video):
    spaced = create_video(title="lo fi beats", description=None)
    create_video(title="lofi", description=None)

    feed = await RankingEngine(db).search_feed(" ")

    assert [item["id"] for item in feed] == [spaced.id]


@pytest.mark.asyncio
async def test_get_feed_dispatches_on_kind_and_query(db, create_video):
    older = create_video(title="popular")
    newer = create_video(title="fresh")
    await add_views(db, older, 2)
    engine = RankingEngine(db)

    recent = await engine.get_feed(FeedKind.RECENT)
    trending = await engine.get_feed(FeedKind.TRENDING)
    search = await engine.get_feed(FeedKind.TRENDING, query="fresh")

    assert [item["id"] for item in recent] == [newer.id, older.id]
    assert [item["id"] for item in trending] == [older.id, newer.id]
    assert [item["id"] for item in search] == [newer.id]

    with pytest.raises(BadRequestError):
        await engine.get_feed(FeedKind.RECENT, query="")
