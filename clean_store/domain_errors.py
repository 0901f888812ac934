"""Domain-level error kinds with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable


@dataclass(eq=False)
class DomainError(Exception):
    """Expected failure with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "statusCode": self.http_status,
        }
        if self.details:
            payload.update(self.details)
        return payload


@dataclass(frozen=True)
class FieldError:
    """A single violated field."""

    field: str
    code: str
    message: str
    constraints: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.constraints is None:
            data.pop("constraints")
        return data


class ValidationError(DomainError):
    CODE = "VALIDATION_ERROR"
    HTTP_STATUS = 400

    def __init__(self, message: str, fields: Iterable[FieldError] = ()) -> None:
        self.fields: list[FieldError] = list(fields)
        super().__init__(
            code=self.CODE,
            http_status=self.HTTP_STATUS,
            message=message,
            details={"fields": [f.to_dict() for f in self.fields]},
        )

    @classmethod
    def from_field_errors(cls, fields: Iterable[FieldError]) -> ValidationError:
        fields = list(fields)
        if len(fields) == 1:
            return cls(fields[0].message, fields)
        return cls(f"Validation failed: {', '.join(f.message for f in fields)}", fields)

    @classmethod
    def single_field(cls, field: str, code: str, message: str) -> ValidationError:
        return cls(message, [FieldError(field=field, code=code, message=message)])

    @classmethod
    def merge(cls, errors: Iterable[ValidationError]) -> ValidationError:
        """Fold several validation failures into one aggregated error."""
        return cls.from_field_errors(f for error in errors for f in error.fields)


class NotFoundError(DomainError):
    CODE = "NOT_FOUND"
    HTTP_STATUS = 404

    def __init__(self, resource_type: str, resource_id: str, lookup: str = "id") -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            code=self.CODE,
            http_status=self.HTTP_STATUS,
            message=f"{resource_type} with {lookup} '{resource_id}' not found",
            details={"resourceType": resource_type, "resourceId": resource_id},
        )

    @classmethod
    def user(cls, user_id: str) -> NotFoundError:
        return cls("User", user_id)

    @classmethod
    def user_by_email(cls, email: str) -> NotFoundError:
        return cls("User", email, lookup="email")

    @classmethod
    def product(cls, product_id: str) -> NotFoundError:
        return cls("Product", product_id)


class ConflictError(DomainError):
    CODE = "CONFLICT"
    HTTP_STATUS = 409

    def __init__(self, message: str, conflicting_field: str | None = None) -> None:
        self.conflicting_field = conflicting_field
        super().__init__(
            code=self.CODE,
            http_status=self.HTTP_STATUS,
            message=message,
            details={"conflictingField": conflicting_field} if conflicting_field else None,
        )

    @classmethod
    def email_in_use(cls) -> ConflictError:
        # The address is deliberately left out of the message.
        return cls("Email already in use", "email")


class UnauthorizedError(DomainError):
    CODE = "UNAUTHORIZED"
    HTTP_STATUS = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(code=self.CODE, http_status=self.HTTP_STATUS, message=message)

    @classmethod
    def invalid_credentials(cls) -> UnauthorizedError:
        return cls("Invalid email or password")

    @classmethod
    def invalid_token(cls) -> UnauthorizedError:
        return cls("Invalid or expired token")

    @classmethod
    def no_token(cls) -> UnauthorizedError:
        return cls("No authentication token provided")


class InvalidOperationError(DomainError):
    CODE = "INVALID_OPERATION"
    HTTP_STATUS = 422

    def __init__(self, message: str) -> None:
        super().__init__(code=self.CODE, http_status=self.HTTP_STATUS, message=message)

    @classmethod
    def insufficient_stock(cls, available: int, requested: int) -> InvalidOperationError:
        return cls(f"Insufficient stock: requested {requested}, available {available}")


def is_domain_error(value: object) -> bool:
    return isinstance(value, DomainError)
