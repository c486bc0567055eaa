"""Process-wide authentication session.

Holds the current user and drives the multi-step login protocol:

    UNAUTHENTICATED --login--> AUTHENTICATED
                           \-> AWAITING_MFA --verify_mfa--> AUTHENTICATED
                           \-> AWAITING_PASSWORD_CHANGE --change_password_on_login--> AUTHENTICATED

Any pending state returns to UNAUTHENTICATED on ``cancel_pending``. Exactly
one state holds at a time. Every action returns an ``AuthResult``; backend
and validation failures never propagate to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from dealdirect_client.application.dto.auth import AuthResult, PendingAuth, RegistrationRequest
from dealdirect_client.application.exceptions import ApiError, AppError, ValidationError
from dealdirect_client.application.policies.validation import (
    validate_mfa_code,
    validate_password,
    validate_phone,
)
from dealdirect_client.domain.entities.user import User
from dealdirect_client.domain.value_objects.enums import AuthErrorKind, AuthState
from dealdirect_client.infrastructure.http.auth_api import AuthApi
from dealdirect_client.infrastructure.mappers.user import dict_to_blocked, dict_to_user

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthState, User | None], Awaitable[None]]

_PENDING_STATES = frozenset({AuthState.AWAITING_MFA, AuthState.AWAITING_PASSWORD_CHANGE})


def _requires_mfa(data: dict[str, Any]) -> bool:
    return bool(data.get("requiresMfa")) or data.get("code") == "REQUIRES_MFA"


def _requires_password_change(data: dict[str, Any]) -> bool:
    return bool(data.get("passwordChangeRequired")) or data.get("code") == "PASSWORD_CHANGE_REQUIRED"


def _is_blocked(data: dict[str, Any]) -> bool:
    return bool(data.get("isBlocked")) or data.get("code") == "ACCOUNT_BLOCKED"


def _message(exc: AppError, default: str) -> str:
    if isinstance(exc, ApiError):
        return exc.payload.get("message") or default
    return default


class AuthSession:
    def __init__(self, api: AuthApi) -> None:
        self._api = api
        self._listeners: list[AuthListener] = []

        self.state = AuthState.UNAUTHENTICATED
        self.user: User | None = None
        self.pending: PendingAuth | None = None
        self.pending_otp_email: str | None = None
        self.error: str | None = None
        self.loading = False
        self.owner_has_property = False

    # -- status -------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED and self.user is not None

    @property
    def requires_mfa(self) -> bool:
        return self.state == AuthState.AWAITING_MFA

    @property
    def requires_password_change(self) -> bool:
        return self.state == AuthState.AWAITING_PASSWORD_CHANGE

    @property
    def is_owner(self) -> bool:
        return self.user is not None and self.user.is_owner

    @property
    def is_buyer(self) -> bool:
        return self.user is not None and self.user.is_buyer

    @property
    def is_verified(self) -> bool:
        return self.user is not None and self.user.is_verified

    @property
    def can_add_property(self) -> bool:
        """Verified owners may list one property."""
        return self.is_authenticated and self.is_owner and self.is_verified and not self.owner_has_property

    def has_role(self, role: str | list[str] | tuple[str, ...]) -> bool:
        return self.user is not None and self.user.has_role(role)

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- actions ------------------------------------------------------------

    async def check_auth(self) -> bool:
        """Restore the session from the backend cookie, if any."""
        self.loading = True
        self.error = None
        try:
            data = await self._api.me()
        except AppError:
            await self._transition(AuthState.UNAUTHENTICATED)
            return False
        finally:
            self.loading = False

        user_data = data.get("user") or data
        if not isinstance(user_data, dict) or not (user_data.get("_id") or user_data.get("id")):
            await self._transition(AuthState.UNAUTHENTICATED)
            return False

        user = dict_to_user(user_data)
        if user.requires_password_change:
            await self._transition(
                AuthState.AWAITING_PASSWORD_CHANGE,
                pending=PendingAuth(email=user.email or ""),
            )
            return False
        await self._set_authenticated(user)
        return True

    async def login(self, email: str, password: str) -> AuthResult:
        self.loading = True
        self.error = None
        if self.state in _PENDING_STATES:
            await self._transition(AuthState.UNAUTHENTICATED)
        try:
            try:
                data = await self._api.login(email, password)
            except ApiError as exc:
                return await self._login_failure(
                    exc.payload, email, _message(exc, "Login failed. Please try again."),
                )
            except AppError as exc:
                return self._fail(exc.detail or "Login failed. Please try again.")

            pending = await self._enter_pending(data, email)
            if pending is not None:
                return pending

            if data.get("success") and data.get("user"):
                user = dict_to_user(data["user"])
                await self._set_authenticated(user)
                return AuthResult(success=True, user=user, data=data)

            return await self._login_failure(data, email, data.get("message") or "Login failed")
        finally:
            self.loading = False

    async def verify_mfa(self, code: str) -> AuthResult:
        if self.state != AuthState.AWAITING_MFA or self.pending is None:
            return self._fail("No MFA verification is pending")
        try:
            code = validate_mfa_code(code)
        except ValidationError as exc:
            return self._fail(exc.detail)

        self.loading = True
        self.error = None
        try:
            data = await self._api.verify_mfa(self.pending.email, code, self.pending.mfa_token)
        except AppError as exc:
            return self._fail(_message(exc, "MFA verification failed. Please try again."))
        finally:
            self.loading = False

        if data.get("success") and data.get("user"):
            user = dict_to_user(data["user"])
            await self._set_authenticated(user)
            return AuthResult(success=True, user=user, data=data)
        return self._fail(data.get("message") or "MFA verification failed")

    async def change_password_on_login(self, new_password: str) -> AuthResult:
        if self.state != AuthState.AWAITING_PASSWORD_CHANGE or self.pending is None:
            return self._fail("No password change is pending")
        try:
            new_password = validate_password(new_password)
        except ValidationError as exc:
            return self._fail(exc.detail)

        self.loading = True
        self.error = None
        try:
            data = await self._api.change_password_required(
                self.pending.email, new_password, self.pending.temp_token,
            )
        except AppError as exc:
            return self._fail(_message(exc, "Password change failed. Please try again."))
        finally:
            self.loading = False

        if data.get("success") and data.get("user"):
            user = dict_to_user(data["user"])
            await self._set_authenticated(user)
            return AuthResult(success=True, user=user, data=data)
        return self._fail(data.get("message") or "Password change failed")

    async def cancel_pending(self) -> None:
        if self.state in _PENDING_STATES:
            await self._transition(AuthState.UNAUTHENTICATED)
        self.pending_otp_email = None

    async def register(self, request: RegistrationRequest) -> AuthResult:
        """Buyers are signed in at once; owners get an OTP by email first."""
        if not request.agree_terms:
            return self._fail("Please accept the Terms & Privacy Policy")
        try:
            validate_phone(request.phone)
            validate_password(request.password)
        except ValidationError as exc:
            return self._fail(exc.detail)

        self.loading = True
        self.error = None
        payload = request.to_payload()
        try:
            if request.is_owner:
                data = await self._api.register(payload)
            else:
                data = await self._api.register_direct(payload)
        except ApiError as exc:
            pending = await self._enter_pending(exc.payload, request.email)
            if pending is not None:
                return pending
            return self._fail(
                _message(exc, "Registration failed. Please check your details and try again."),
                data=exc.payload,
            )
        except AppError as exc:
            return self._fail(exc.detail or "Registration failed. Please try again.")
        finally:
            self.loading = False

        pending = await self._enter_pending(data, request.email)
        if pending is not None:
            return pending

        if request.is_owner:
            self.pending_otp_email = request.email
            return AuthResult(
                success=True,
                message=data.get("message") or "OTP sent to your email",
                otp_required=True,
                data=data,
            )

        if isinstance(data.get("user"), dict):
            user = dict_to_user(data["user"])
            await self._set_authenticated(user)
            return AuthResult(success=True, user=user, data=data)
        if data.get("success"):
            return AuthResult(success=True, message=data.get("message"), data=data)
        return self._fail(data.get("message") or "Registration failed")

    async def verify_otp(self, otp: str) -> AuthResult:
        email = self.pending_otp_email
        if not email:
            return self._fail("No registration is awaiting verification")
        try:
            data = await self._api.verify_otp(email, otp.strip())
        except AppError as exc:
            return self._fail(_message(exc, "Invalid OTP. Please try again."))

        pending = await self._enter_pending(data, email)
        if pending is not None:
            self.pending_otp_email = None
            return pending

        if isinstance(data.get("user"), dict):
            user = dict_to_user(data["user"])
            await self._set_authenticated(user)
            return AuthResult(success=True, user=user, data=data)
        return self._fail(data.get("message") or "Invalid OTP. Please try again.")

    async def resend_otp(self) -> AuthResult:
        if not self.pending_otp_email:
            return self._fail("No registration is awaiting verification")
        try:
            data = await self._api.resend_otp(self.pending_otp_email)
        except AppError as exc:
            return self._fail(_message(exc, "Failed to resend OTP. Please try again."))
        return AuthResult(success=True, message=data.get("message") or "New OTP sent to your email", data=data)

    async def forgot_password(self, email: str) -> AuthResult:
        try:
            data = await self._api.forgot_password(email)
        except AppError as exc:
            return self._fail(_message(exc, "Failed to send reset code"))
        return AuthResult(success=True, message=data.get("message"), data=data)

    async def reset_password(self, token: str, password: str) -> AuthResult:
        try:
            password = validate_password(password)
        except ValidationError as exc:
            return self._fail(exc.detail)
        try:
            data = await self._api.reset_password(token, password)
        except AppError as exc:
            return self._fail(_message(exc, "Password reset failed"))
        return AuthResult(success=True, message=data.get("message"), data=data)

    async def logout(self) -> None:
        """Local state is cleared even when the server call fails."""
        self.loading = True
        try:
            await self._api.logout()
        except AppError as exc:
            logger.warning("Logout API call failed: %s", exc.detail)
        finally:
            self.loading = False
            self.pending_otp_email = None
            await self._transition(AuthState.UNAUTHENTICATED)

    def update_user(self, user: User) -> None:
        if self.is_authenticated:
            self.user = user

    async def refresh_owner_property(self) -> bool:
        if not self.is_owner:
            self.owner_has_property = False
            return False
        try:
            count = await self._api.my_property_count()
        except AppError as exc:
            logger.warning("Could not check owner properties: %s", exc.detail)
            count = 0
        self.owner_has_property = count >= 1
        return self.owner_has_property

    async def handle_auth_error(self, kind: AuthErrorKind, message: str) -> None:
        """Registered on the API client; a 401 ends an authenticated session."""
        if kind == AuthErrorKind.UNAUTHORIZED:
            if self.state == AuthState.AUTHENTICATED:
                logger.info("Session expired, signing out")
                self.error = message
                await self._transition(AuthState.UNAUTHENTICATED)
        elif kind == AuthErrorKind.FORBIDDEN:
            self.error = message

    def clear_error(self) -> None:
        self.error = None

    # -- internals ----------------------------------------------------------

    def _fail(self, message: str, *, data: dict[str, Any] | None = None) -> AuthResult:
        self.error = message
        return AuthResult(success=False, message=message, data=data or {})

    async def _login_failure(self, payload: dict[str, Any], email: str, message: str) -> AuthResult:
        pending = await self._enter_pending(payload, email)
        if pending is not None:
            return pending
        if _is_blocked(payload):
            blocked = dict_to_blocked(payload)
            self.error = blocked.message
            return AuthResult(success=False, message=blocked.message, blocked=blocked, data=payload)
        return self._fail(message, data=payload)

    async def _enter_pending(self, data: dict[str, Any], email: str) -> AuthResult | None:
        if _requires_mfa(data):
            await self._transition(
                AuthState.AWAITING_MFA,
                pending=PendingAuth(email=email, mfa_token=data.get("mfaToken")),
            )
            return AuthResult(
                success=False,
                requires_mfa=True,
                message=data.get("message") or "Please complete MFA verification",
                data=data,
            )
        if _requires_password_change(data):
            await self._transition(
                AuthState.AWAITING_PASSWORD_CHANGE,
                pending=PendingAuth(email=email, temp_token=data.get("tempToken")),
            )
            return AuthResult(
                success=False,
                password_change_required=True,
                message=data.get("message") or "You must change your password before continuing",
                data=data,
            )
        return None

    async def _set_authenticated(self, user: User) -> None:
        self.pending_otp_email = None
        self.error = None
        await self._transition(AuthState.AUTHENTICATED, user=user)
        await self.refresh_owner_property()

    async def _transition(
        self,
        state: AuthState,
        *,
        user: User | None = None,
        pending: PendingAuth | None = None,
    ) -> None:
        before = (self.state, self.user.id if self.user else None)
        self.state = state
        self.user = user if state == AuthState.AUTHENTICATED else None
        self.pending = pending if state in _PENDING_STATES else None
        if state != AuthState.AUTHENTICATED:
            self.owner_has_property = False

        after = (self.state, self.user.id if self.user else None)
        if before == after:
            return
        logger.info("Auth state %s -> %s", before[0], state)
        for listener in list(self._listeners):
            try:
                await listener(self.state, self.user)
            except Exception:
                logger.exception("Auth listener failed")
