import pytest
from db.db_operation import mongo_conn
from models.review import FeedbackIn
from services.review_service import feedback_branch, is_urgent, submit_feedback
from settings.config import settings
from tests.conftest import FakeResult

class FakeReviews:
    def __init__(self):
        self.inserted = []

    async def insert_one(self, doc):
        self.inserted.append(doc)
        return FakeResult(inserted_id="r-1")

@pytest.mark.parametrize("rating, branch", [
    (1, "internal_form"), (2, "internal_form"), (3, "internal_form"),
    (4, "external_review"), (5, "external_review"),
])
def test_feedback_branch(rating, branch):
    assert feedback_branch(rating) == branch

async def test_five_stars_go_to_external_review_and_store_nothing(monkeypatch):
    fake = FakeReviews()
    monkeypatch.setattr(mongo_conn, "reviews", fake)
    result = await submit_feedback(FeedbackIn(rating=5))
    assert result.branch == "external_review"
    assert result.review_url == settings.GOOGLE_MAPS_LINK
    assert result.review is None
    assert fake.inserted == []

async def test_low_rating_needs_comment(monkeypatch):
    monkeypatch.setattr(mongo_conn, "reviews", FakeReviews())
    with pytest.raises(ValueError):
        await submit_feedback(FeedbackIn(rating=2, comment="  "))

async def test_low_rating_is_stored_and_flagged(monkeypatch):
    fake = FakeReviews()
    monkeypatch.setattr(mongo_conn, "reviews", fake)
    result = await submit_feedback(FeedbackIn(rating=2, comment="Cold soup", customer_name="Bo"))
    assert result.branch == "internal_form"
    assert result.review.urgent is True
    assert fake.inserted[0]["comment"] == "Cold soup"
    assert not is_urgent(3)
