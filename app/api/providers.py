"""Repository and cache singletons, exposed as FastAPI dependencies.

PostgreSQL repos when DATABASE_URL is set, otherwise in-memory repos over
the shared ``dataset``.  Routes take these through ``Depends`` so tests can
swap any of them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from app.db.engine import async_session_factory
from app.repos.access_rule_repo import AccessRuleRepo, InMemoryAccessRuleRepo
from app.repos.analytics_repo import AnalyticsRepo, InMemoryAnalyticsRepo
from app.repos.engagement_repo import EngagementRepo, InMemoryEngagementRepo
from app.repos.gradebook_repo import GradebookRepo, InMemoryGradebookRepo
from app.repos.memory_store import dataset
from app.repos.privacy_repo import InMemoryPrivacyRepo, PrivacyRepo
from app.repos.search_repo import InMemorySearchRepo, SearchRepo
from app.repos.user_repo import InMemoryUserRepo, UserRepo
from app.services.cache import CacheService, cache_service

if async_session_factory is not None:
    from app.repos.pg_access_rule_repo import PgAccessRuleRepo
    from app.repos.pg_analytics_repo import PgAnalyticsRepo
    from app.repos.pg_engagement_repo import PgEngagementRepo
    from app.repos.pg_gradebook_repo import PgGradebookRepo
    from app.repos.pg_privacy_repo import PgPrivacyRepo
    from app.repos.pg_search_repo import PgSearchRepo
    from app.repos.pg_user_repo import PgUserRepo

    user_repo: UserRepo = PgUserRepo(async_session_factory)
    gradebook_repo: GradebookRepo = PgGradebookRepo(async_session_factory)
    engagement_repo: EngagementRepo = PgEngagementRepo(async_session_factory)
    search_repo: SearchRepo = PgSearchRepo(async_session_factory)
    analytics_repo: AnalyticsRepo = PgAnalyticsRepo(async_session_factory)
    access_rule_repo: AccessRuleRepo = PgAccessRuleRepo(async_session_factory)
    privacy_repo: PrivacyRepo = PgPrivacyRepo(async_session_factory)
else:
    user_repo = InMemoryUserRepo(dataset)
    gradebook_repo = InMemoryGradebookRepo(dataset)
    engagement_repo = InMemoryEngagementRepo(dataset)
    search_repo = InMemorySearchRepo(dataset)
    analytics_repo = InMemoryAnalyticsRepo(dataset)
    access_rule_repo = InMemoryAccessRuleRepo(dataset)
    privacy_repo = InMemoryPrivacyRepo(dataset)


def get_user_repo() -> UserRepo:
    return user_repo


def get_gradebook_repo() -> GradebookRepo:
    return gradebook_repo


def get_engagement_repo() -> EngagementRepo:
    return engagement_repo


def get_search_repo() -> SearchRepo:
    return search_repo


def get_analytics_repo() -> AnalyticsRepo:
    return analytics_repo


def get_access_rule_repo() -> AccessRuleRepo:
    return access_rule_repo


def get_privacy_repo() -> PrivacyRepo:
    return privacy_repo


def get_cache() -> CacheService:
    return cache_service
