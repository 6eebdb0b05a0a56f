"""
Service for creating and listing microposts
"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.micropost import Micropost
from models.user import User
from schemas import MicropostCreate, parse_payload
from utils.errors import InvalidOperation, ValidationError
from utils.logging_config import log_error, log_user_action
from utils.validators import validate_micropost_content


class PostService:
    def __init__(self, db_session, logger, per_page=30):
        self.db = db_session
        self.logger = logger
        self.per_page = per_page

    def create(self, user_id, data):
        """Create a micropost owned by user_id"""
        payload = parse_payload(MicropostCreate, data)

        errors = {}
        content_errors = validate_micropost_content(payload.content)
        if content_errors:
            errors['content'] = content_errors
        if user_id is None:
            errors['user_id'] = ["can't be blank"]
        elif not self.db.session.get(User, user_id):
            errors['user_id'] = ['must exist']
        if errors:
            raise ValidationError(errors)

        post = Micropost(user_id=user_id, content=payload.content)
        try:
            self.db.session.add(post)
            self.db.session.commit()
        except IntegrityError as e:
            # Owner destroyed between the check and the insert
            self.db.session.rollback()
            log_error(self.logger, e, context=f"create micropost for user {user_id}")
            raise ValidationError({'user_id': ['must exist']}) from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"create micropost for user {user_id}")
            raise

        log_user_action(self.logger, user_id, 'post', details=f"micropost {post.id}")
        return post

    def get(self, post_id):
        return self.db.session.get(Micropost, post_id)

    def list_for_user(self, user_id):
        """Microposts of user_id, newest first. Lazy; empty for unknown users."""
        return Micropost.query.filter_by(user_id=user_id).order_by(
            Micropost.created_at.desc(), Micropost.id.desc()
        )

    def list_page(self, user_id, page=1, per_page=None):
        return self.list_for_user(user_id).paginate(page=page, per_page=per_page or self.per_page, error_out=False)

    def count_for_user(self, user_id):
        return Micropost.query.filter_by(user_id=user_id).count()

    def destroy(self, post_id, acting_user_id):
        """Delete one micropost on behalf of its owner.

        Returns False when the post does not exist.
        """
        post = self.get(post_id)
        if not post:
            return False
        if post.user_id != acting_user_id:
            raise InvalidOperation(f"User {acting_user_id} does not own micropost {post_id}")

        try:
            self.db.session.delete(post)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"destroy micropost {post_id}")
            raise

        log_user_action(self.logger, acting_user_id, 'delete post', details=f"micropost {post_id}")
        return True

    def destroy_all_for_user(self, user_id):
        """Delete every micropost of user_id. The caller commits."""
        return Micropost.query.filter_by(user_id=user_id).delete(synchronize_session=False)
