from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import make_url

ALLOWED_LOCAL_HOSTS = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "postgres",
        "gift_promotions_postgres",
    }
)


@dataclass(frozen=True, slots=True)
class IntegrationDbTarget:
    backend: str
    database_name: str
    host: str

    @property
    def problem(self) -> str | None:
        if self.backend != "postgresql":
            return "integration tests run only against PostgreSQL"
        if not self.database_name:
            return "database name is empty"
        if "test" not in self.database_name.lower():
            return "database name must contain 'test'"
        if self.host not in ALLOWED_LOCAL_HOSTS:
            return f"host '{self.host}' is not a local integration-test host"
        return None


def describe_integration_db(database_url: str) -> IntegrationDbTarget:
    parsed = make_url(database_url)
    return IntegrationDbTarget(
        backend=parsed.get_backend_name(),
        database_name=(parsed.database or "").strip(),
        host=(parsed.host or "").strip().lower(),
    )


def assert_safe_integration_db(database_url: str) -> None:
    target = describe_integration_db(database_url)
    problem = target.problem
    if problem is None:
        return

    raise RuntimeError(
        "Refusing to truncate tables outside a dedicated test database: "
        f"{problem} (db='{target.database_name}', host='{target.host}'). "
        "Point DATABASE_URL at e.g. 'gift_promotions_test' on localhost."
    )
