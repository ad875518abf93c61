"""Declarative request-body validation.

A route declares an ordered list of ``Rule`` objects. Each rule names a field,
a check and the message reported when the check fails. Rules run in order and
the first failing rule of a field wins: once a field has an error, its later
rules are skipped. Checks may return a transformed value (email
normalization), which later rules and the handler then see.

Usage:
    RegisterBody = Annotated[dict[str, Any], Depends(validated_body(REGISTER_RULES))]

    @router.post("/register")
    async def register(data: RegisterBody, db: DbSession): ...
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email
from fastapi import Request

from user_service.utils.exceptions import raise_validation_failed

Check = Callable[[Any], Any]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Providers that ignore sub-address tags ("bob+news@...") and the separator they use
_SUBADDRESS_SEPARATORS: dict[str, str] = {
    "gmail.com": "+",
    "outlook.com": "+",
    "hotmail.com": "+",
    "live.com": "+",
    "icloud.com": "+",
    "me.com": "+",
    "mac.com": "+",
    "yahoo.com": "-",
    "ymail.com": "-",
}
_DOMAIN_ALIASES = {"googlemail.com": "gmail.com"}


@dataclass(frozen=True)
class Rule:
    """One constraint on one field. ``check`` raises ``ValueError`` when unmet."""

    field: str
    check: Check
    message: str


def required() -> Check:
    def check(value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("missing")
        return value

    return check


def length(min_length: int = 0, max_length: int | None = None) -> Check:
    """Character-count bounds, inclusive on both ends."""

    def check(value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("not a string")
        if len(value) < min_length:
            raise ValueError("too short")
        if max_length is not None and len(value) > max_length:
            raise ValueError("too long")
        return value

    return check


def normalize_email(address: str) -> str:
    """Lower-case an address and drop tags its provider ignores.

    ``Bob.Smith+news@GoogleMail.com`` becomes ``bobsmith@gmail.com``.
    """
    local, _, domain = address.strip().lower().rpartition("@")
    domain = _DOMAIN_ALIASES.get(domain, domain)

    separator = _SUBADDRESS_SEPARATORS.get(domain)
    if separator:
        local = local.split(separator, 1)[0]
    if domain == "gmail.com":
        local = local.replace(".", "")

    return f"{local}@{domain}"


def email() -> Check:
    """Email syntax check; returns the normalized address."""

    def check(value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("not a string")
        try:
            validated = validate_email(value.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        normalized = normalize_email(validated.normalized)
        if normalized.startswith("@"):
            raise ValueError("empty local part")
        return normalized

    return check


def validate(payload: Mapping[str, Any], rules: Sequence[Rule]) -> tuple[dict[str, Any], dict[str, str]]:
    """Run ``rules`` against ``payload``.

    Returns:
        A tuple of the cleaned values (only the fields named by the rules) and
        the error map. The error map is empty when the payload is valid.
    """
    values = dict(payload)
    errors: dict[str, str] = {}

    for rule in rules:
        if rule.field in errors:
            continue
        try:
            result = rule.check(values.get(rule.field))
        except ValueError:
            errors[rule.field] = rule.message
            continue
        if result is not None or rule.field in values:
            values[rule.field] = result

    fields = dict.fromkeys(rule.field for rule in rules)
    cleaned = {name: values[name] for name in fields if name in values}
    return cleaned, errors


async def _read_payload(request: Request) -> Any:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPE):
        form = await request.form()
        return dict(form)

    body = await request.body()
    if not body.strip():
        return {}
    try:
        return await request.json()
    except ValueError as exc:
        raise_validation_failed({"body": "Request body must be valid JSON"}, cause=exc)


def validated_body(rules: Sequence[Rule]) -> Callable[[Request], Awaitable[dict[str, Any]]]:
    """Build a FastAPI dependency that validates the request body against ``rules``."""

    async def dependency(request: Request) -> dict[str, Any]:
        payload = await _read_payload(request)
        if not isinstance(payload, dict):
            raise_validation_failed({"body": "Request body must be a JSON object"})

        cleaned, errors = validate(payload, rules)
        if errors:
            raise_validation_failed(errors)
        return cleaned

    return dependency


NAME_RULES = [
    Rule("name", required(), "Name is required"),
    Rule("name", length(3, 255), "Name must be between 3 and 255 characters"),
]
EMAIL_RULES = [
    Rule("email", required(), "Email is required"),
    Rule("email", email(), "Email is not valid"),
]
PASSWORD_RULES = [
    Rule("password", required(), "Password is required"),
    Rule("password", length(6, 32), "Password must be between 6 and 32 characters"),
]

REGISTER_RULES = [*NAME_RULES, *EMAIL_RULES, *PASSWORD_RULES]
LOGIN_RULES = [*EMAIL_RULES, *PASSWORD_RULES]
UPDATE_USER_RULES = [*NAME_RULES]
