"""
Tenant and user service.

Handles signup (a new tenant with its first user), tenant membership,
credential checks and the resolution of an authenticated identity into a
TenantScope. The tenant of a scope always comes from the stored user row.
"""

from typing import List, Optional

from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError

from ..config import get_config
from ..context.operation_context import operation
from ..context.tenant_context import TenantScope, get_scoped_or_404, scoped_query
from ..db.db_tenant_models import Tenant, User
from ..db.db_ticket_models import Ticket
from ..exceptions import (
    AuthenticationError,
    AuthorizationError,
    duplicate,
    not_found,
    permission_denied,
    validation_failed,
)
from ..schemas.tenant_schema import (
    AuthUser,
    SignupRequest,
    SignupResult,
    TenantRead,
    UserCreate,
    UserRead,
)
from ..utils.auth_utils import create_token, hash_password, verify_password
from .base_service import SessionManagedService


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class TenantService(SessionManagedService):
    """Service for tenants, their users and authentication."""

    def _validate_user_data(self, data: UserCreate) -> str:
        email = normalize_email(data.email)
        if "@" not in email:
            raise validation_failed("email", data.email, "must be a valid email address")
        min_length = get_config().security.min_password_length
        if len(data.password or "") < min_length:
            raise validation_failed(
                "password", "***", f"must be at least {min_length} characters"
            )
        return email

    def _ensure_email_free(self, email: str) -> None:
        if self.session.query(exists().where(User.email == email)).scalar():
            raise duplicate("User", "email")

    def _new_user(self, tenant_id: str, email: str, data: UserCreate) -> User:
        user = User(
            email=email,
            name=(data.name or "").strip() or None,
            password_hash=hash_password(data.password),
            tenant_id=tenant_id,
        )
        self.session.add(user)
        return user

    @operation()
    def signup(self, data: SignupRequest) -> SignupResult:
        """
        Create a tenant and its first user in one transaction.

        Raises:
            ValidationError: On a missing organization name, bad email or short password
            ConflictError: If the email is already registered
        """
        organization_name = (data.organization_name or "").strip()
        if not organization_name:
            raise validation_failed("organization_name", data.organization_name, "is required")
        email = self._validate_user_data(data)
        try:
            with self.transaction():
                self._ensure_email_free(email)
                tenant = Tenant(name=organization_name)
                self.session.add(tenant)
                self.session.flush()
                user = self._new_user(tenant.id, email, data)
                self.session.flush()
            self.logger.info(
                "Signed up tenant", extra={"tenant_id": tenant.id, "user_id": user.id}
            )
            return SignupResult(
                user=UserRead.model_validate(user), tenant=TenantRead.model_validate(tenant)
            )
        except IntegrityError as e:
            raise duplicate("User", "email", cause=e) from e
        except Exception as e:
            self._handle_service_exception("signup", e)

    @operation()
    def create_user(self, scope: TenantScope, data: UserCreate) -> UserRead:
        """
        Add a user to the caller's tenant.

        Raises:
            ValidationError: On a bad email or short password
            ConflictError: If the email is already registered in any tenant
        """
        email = self._validate_user_data(data)
        try:
            with self.transaction():
                self._ensure_email_free(email)
                user = self._new_user(scope.tenant_id, email, data)
                self.session.flush()
            return UserRead.model_validate(user)
        except IntegrityError as e:
            raise duplicate("User", "email", cause=e) from e
        except Exception as e:
            self._handle_service_exception("create_user", e)

    @operation()
    def list_users(self, scope: TenantScope) -> List[UserRead]:
        """Members of the caller's tenant, newest first."""
        users = scoped_query(self.session, User, scope).order_by(User.created_at.desc()).all()
        return [UserRead.model_validate(u) for u in users]

    @operation()
    def get_user(self, scope: TenantScope, user_id: str) -> UserRead:
        return UserRead.model_validate(get_scoped_or_404(self.session, User, user_id, scope))

    @operation()
    def delete_user(self, scope: TenantScope, user_id: str) -> None:
        """
        Remove a member of the caller's tenant.

        Tickets assigned to the user become unassigned. History entries keep
        the user's raw id.

        Raises:
            AuthorizationError: When deleting oneself or a user of another tenant
            NotFoundError: If no such user exists
        """
        if user_id == scope.user_id:
            raise AuthorizationError("cannot delete yourself", action="delete", user_id=user_id)
        user = self.session.get(User, user_id)
        if user is None:
            raise not_found("User", user_id=user_id)
        if user.tenant_id != scope.tenant_id:
            raise permission_denied("delete", "User", user_id=user_id)
        try:
            with self.transaction():
                scoped_query(self.session, Ticket, scope).filter(
                    Ticket.assignee_id == user_id
                ).update({Ticket.assignee_id: None}, synchronize_session="fetch")
                self.session.delete(user)
            self.logger.info("Deleted user", extra={"deleted_user_id": user_id})
        except Exception as e:
            self._handle_service_exception("delete_user", e, user_id)

    def resolve_scope(self, auth_user: Optional[AuthUser]) -> TenantScope:
        """
        Turn an authenticated identity into a scope.

        Raises:
            AuthenticationError: If there is no identity or the user no longer exists
        """
        if auth_user is None:
            raise AuthenticationError()
        user = self.session.get(User, auth_user.id)
        if user is None:
            raise AuthenticationError(user_id=auth_user.id)
        return TenantScope(tenant_id=user.tenant_id, user_id=user.id, email=user.email)

    @operation()
    def authenticate(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Check credentials and issue an auth token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = (
            self.session.query(User).filter(User.email == normalize_email(email)).first()
            if email
            else None
        )
        if user is None or not verify_password(password or "", user.password_hash):
            raise AuthenticationError("invalid credentials")
        return create_token(user.id, user.email)
