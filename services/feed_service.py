"""
Home feed: a user's own microposts plus those of everyone they follow
"""
from sqlalchemy import or_

from models.micropost import Micropost
from models.user import User
from utils.errors import InvalidOperation


class FeedService:
    def __init__(self, db_session, following_service, logger, per_page=30):
        self.db = db_session
        self.following = following_service
        self.logger = logger
        self.per_page = per_page

    def feed(self, user_id):
        """Feed of user_id, newest first, ties broken by id.

        Returns an unevaluated query: nothing is cached, so each evaluation
        reads the follow graph and microposts as they are at that moment.
        Callers can slice, limit or paginate it.
        """
        if user_id is None or not self.db.session.get(User, user_id):
            raise InvalidOperation(f"User {user_id} not found")

        followed_ids = self.following.followed_ids_select(user_id)
        return Micropost.query.filter(
            or_(Micropost.user_id == user_id, Micropost.user_id.in_(followed_ids))
        ).order_by(
            Micropost.created_at.desc(), Micropost.id.desc()
        )

    def feed_page(self, user_id, page=1, per_page=None):
        """One page of the feed"""
        pagination = self.feed(user_id).paginate(page=page, per_page=per_page or self.per_page, error_out=False)
        self.logger.debug(f"Feed page {page} for user {user_id}: {len(pagination.items)} of {pagination.total}")
        return pagination
