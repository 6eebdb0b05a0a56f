"""
Service for user accounts: signup, authentication, profile edits and removal
"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from schemas import UserCreate, UserUpdate, parse_payload
from utils.errors import InvalidOperation, ValidationError
from utils.logging_config import log_audit, log_error, log_user_action
from utils.validators import normalize_email, validate_email, validate_name, validate_password


class IdentityService:
    def __init__(self, db, verifier, logger, post_service, following_service, per_page=30):
        self.db = db
        self.verifier = verifier
        self.logger = logger
        self.posts = post_service
        self.following = following_service
        self.per_page = per_page

    def _email_errors(self, email, exclude_user_id=None):
        if not email:
            return ["can't be blank"]
        if not validate_email(email):
            return ['is invalid']
        query = User.query.filter(func.lower(User.email) == email)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        if self.db.session.query(query.exists()).scalar():
            return ['has already been taken']
        return []

    def _commit_user(self, user, action):
        """Commit a new or changed user, mapping a lost email race to a validation error"""
        email = user.email
        try:
            self.db.session.add(user)
            self.db.session.commit()
        except IntegrityError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"{action} {email}")
            raise ValidationError({'email': ['has already been taken']}) from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"{action} {email}")
            raise

    def create(self, data):
        """Register a new user"""
        payload = parse_payload(UserCreate, data)
        name = payload.name.strip()
        email = normalize_email(payload.email)

        errors = {}
        name_errors = validate_name(name)
        if name_errors:
            errors['name'] = name_errors
        email_errors = self._email_errors(email)
        if email_errors:
            errors['email'] = email_errors
        errors.update(validate_password(
            payload.password, payload.password_confirmation, require_confirmation=True
        ))
        if errors:
            raise ValidationError(errors)

        user = User(
            name=name,
            email=email,
            password_hash=self.verifier.hash(payload.password)
        )
        self._commit_user(user, 'create user')

        log_user_action(self.logger, user.id, 'signup')
        return user

    def get(self, user_id):
        if user_id is None:
            return None
        return self.db.session.get(User, user_id)

    def find_by_email(self, email):
        email = normalize_email(email)
        if not email:
            return None
        return User.query.filter_by(email=email).first()

    def _require(self, user_id):
        user = self.get(user_id)
        if not user:
            raise InvalidOperation(f"User {user_id} not found")
        return user

    def authenticate(self, email, password):
        """Return the user whose credentials match, or None"""
        user = self.find_by_email(email)
        if not user or not self.verifier.verify(password, user.password_hash):
            self.logger.info(f"Failed authentication for {normalize_email(email) or 'blank email'}")
            return None
        return user

    def update(self, user_id, data):
        """Edit name, email or password of an existing user"""
        user = self._require(user_id)
        payload = parse_payload(UserUpdate, data)

        errors = {}
        if payload.name is not None:
            name_errors = validate_name(payload.name.strip())
            if name_errors:
                errors['name'] = name_errors
        if payload.email is not None:
            email_errors = self._email_errors(normalize_email(payload.email), exclude_user_id=user.id)
            if email_errors:
                errors['email'] = email_errors
        if payload.password is not None or payload.password_confirmation is not None:
            errors.update(validate_password(
                payload.password, payload.password_confirmation,
                require_confirmation=payload.password is not None
            ))
        if errors:
            raise ValidationError(errors)

        if payload.name is not None:
            user.name = payload.name.strip()
        if payload.email is not None:
            user.email = normalize_email(payload.email)
        if payload.password is not None:
            user.password_hash = self.verifier.hash(payload.password)
        self._commit_user(user, 'update user')

        log_user_action(self.logger, user.id, 'update profile')
        return user

    def list_users(self, page=1, per_page=None):
        return User.query.order_by(User.id).paginate(page=page, per_page=per_page or self.per_page, error_out=False)

    def destroy(self, user_id):
        """Delete a user with its microposts and every follow edge touching it,
        as one transaction."""
        user = self._require(user_id)
        try:
            removed_edges = self.following.remove_all_for_user(user.id)
            removed_posts = self.posts.destroy_all_for_user(user.id)
            self.db.session.delete(user)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"destroy user {user_id}")
            raise

        log_audit(
            self.logger, user_id, 'destroy user',
            details=f"{removed_posts} microposts, {removed_edges} relationships"
        )

    def destroy_as(self, acting_user_id, target_id):
        """Admin-only removal of another user"""
        acting_user = self._require(acting_user_id)
        if not acting_user.is_admin:
            raise InvalidOperation('Admin privileges required')
        if acting_user.id == target_id:
            raise InvalidOperation('Admins cannot delete themselves')

        self.destroy(target_id)
        log_audit(self.logger, acting_user_id, 'admin delete', details=f"user {target_id}")
