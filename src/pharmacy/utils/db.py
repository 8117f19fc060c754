from protean.domain import Domain
from sqlalchemy import create_engine

SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for provider in domain.providers.values():
        if provider.conn_info["provider"] in SQL_PROVIDERS:
            yield provider, create_engine(provider.conn_info["database_uri"])


def setup_db(domain: Domain):
    """Create tables for SQL-backed providers.

    With the default in-memory provider this does nothing.
    """
    with domain.domain_context():
        for provider, engine in _sql_providers(domain):
            # Touching each DAO registers its table on the provider's metadata
            for record in domain.registry.aggregates.values():
                if record.cls.meta_.provider == provider.name:
                    domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    with domain.domain_context():
        for provider, engine in _sql_providers(domain):
            provider._metadata.drop_all(engine)
