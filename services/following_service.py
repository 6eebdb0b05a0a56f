"""
Service for handling the follow graph between users
"""
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.relationship import Relationship
from models.user import User
from utils.errors import InvalidOperation
from utils.logging_config import log_error, log_user_action


class FollowingService:
    def __init__(self, db_session, logger, per_page=30):
        self.db = db_session
        self.logger = logger
        self.per_page = per_page

    def _require_user(self, user_id):
        user = self.db.session.get(User, user_id) if user_id is not None else None
        if not user:
            raise InvalidOperation(f"User {user_id} not found")
        return user

    def _find_edge(self, follower_id, followed_id):
        return Relationship.query.filter_by(
            follower_id=follower_id,
            followed_id=followed_id
        ).first()

    def follow(self, follower_id, target_id):
        """Follow another user.

        Following someone already followed is a no-op that returns the
        existing edge. Two concurrent identical calls still leave exactly one
        edge: the insert runs in a savepoint and the unique constraint decides
        the loser, whose IntegrityError is swallowed.
        """
        if follower_id == target_id:
            raise InvalidOperation('Cannot follow yourself')

        self._require_user(follower_id)
        self._require_user(target_id)

        existing = self._find_edge(follower_id, target_id)
        if existing:
            return existing

        try:
            with self.db.session.begin_nested():
                edge = Relationship(follower_id=follower_id, followed_id=target_id)
                self.db.session.add(edge)
            self.db.session.commit()
        except IntegrityError as e:
            existing = self._find_edge(follower_id, target_id)
            if not existing:
                self.db.session.rollback()
                log_error(self.logger, e, context=f"follow {follower_id} -> {target_id}")
                raise InvalidOperation(f"Cannot follow user {target_id}") from e
            self.db.session.commit()
            self.logger.info(f"Duplicate follow {follower_id} -> {target_id} ignored")
            return existing
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"follow {follower_id} -> {target_id}")
            raise

        log_user_action(self.logger, follower_id, 'follow', details=f"user {target_id}")
        return edge

    def unfollow(self, follower_id, target_id):
        """Unfollow a user. Returns True if an edge was removed."""
        try:
            removed = Relationship.query.filter_by(
                follower_id=follower_id,
                followed_id=target_id
            ).delete(synchronize_session=False)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"unfollow {follower_id} -> {target_id}")
            raise

        if removed:
            log_user_action(self.logger, follower_id, 'unfollow', details=f"user {target_id}")
        return bool(removed)

    def is_following(self, follower_id, target_id):
        """Check if follower_id follows target_id"""
        if follower_id == target_id:
            return False
        query = Relationship.query.filter_by(follower_id=follower_id, followed_id=target_id)
        return self.db.session.query(query.exists()).scalar()

    def followed_ids_select(self, user_id):
        """SELECT of the ids user_id follows, for use inside other queries"""
        return select(Relationship.followed_id).where(Relationship.follower_id == user_id)

    def followed_users(self, user_id):
        """Ids of the users user_id follows"""
        return set(self.db.session.scalars(self.followed_ids_select(user_id)))

    def followers(self, user_id):
        """Ids of the users following user_id"""
        stmt = select(Relationship.follower_id).where(Relationship.followed_id == user_id)
        return set(self.db.session.scalars(stmt))

    def list_followed_users(self, user_id, page=1, per_page=None):
        """Page of users user_id follows, oldest follow first"""
        return User.query.join(
            Relationship, Relationship.followed_id == User.id
        ).filter(
            Relationship.follower_id == user_id
        ).order_by(
            Relationship.created_at, Relationship.id
        ).paginate(page=page, per_page=per_page or self.per_page, error_out=False)

    def list_followers(self, user_id, page=1, per_page=None):
        """Page of users following user_id, oldest follow first"""
        return User.query.join(
            Relationship, Relationship.follower_id == User.id
        ).filter(
            Relationship.followed_id == user_id
        ).order_by(
            Relationship.created_at, Relationship.id
        ).paginate(page=page, per_page=per_page or self.per_page, error_out=False)

    def count_followed_users(self, user_id):
        return Relationship.query.filter_by(follower_id=user_id).count()

    def count_followers(self, user_id):
        return Relationship.query.filter_by(followed_id=user_id).count()

    def remove_all_for_user(self, user_id):
        """Delete every edge touching user_id. The caller commits."""
        return Relationship.query.filter(
            or_(Relationship.follower_id == user_id, Relationship.followed_id == user_id)
        ).delete(synchronize_session=False)
