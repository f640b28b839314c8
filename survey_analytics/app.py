import copy
import datetime
import logging
import os
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from dotenv import load_dotenv

from survey_analytics import config
from survey_analytics.analytics_cache import AnalyticsCache, CacheKey
from survey_analytics.exceptions import (
    AnalyticsError,
    DataFetchError,
    InvalidQueryError,
    TemplateNotFoundError,
)
from survey_analytics.reporting.aggregator import generate_detailed_report
from survey_analytics.reporting.models import AnalyticsQuery, DetailedReport
from survey_analytics.reporting.render import render_report
from survey_analytics.reporting.overview import build_overview
from survey_analytics.survey_data import SurveyTemplate, parse_timestamp
from survey_analytics.survey_store import ResponseStore, TemplateStore

# Load environment variables from .env file
load_dotenv()

# Set up logging
logging_level = os.environ.get("ANALYTICS_LOG_LEVEL", "INFO")
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging_level
)
logger = logging.getLogger(__name__)

# Shared cache for live summaries; one per process
analytics_cache = AnalyticsCache(default_ttl_seconds=config.CACHE_TTL_SECONDS)

DateLike = Union[str, datetime.date, None]


# ------------------------------------------------------------------
# Query validation
# ------------------------------------------------------------------


def _parse_template_id(raw: Any) -> str:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidQueryError("template_id is required.")
    try:
        return str(uuid.UUID(str(raw).strip()))
    except ValueError:
        raise InvalidQueryError(f"template_id '{raw}' is not a valid UUID.") from None


def _parse_date(name: str, raw: DateLike) -> Optional[datetime.date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime.datetime):
        return raw.date()
    if isinstance(raw, datetime.date):
        return raw
    text = str(raw).strip()
    try:
        if len(text) == 10:
            return datetime.date.fromisoformat(text)
        # Full timestamps are accepted and reduced to their UTC date
        return parse_timestamp(text).date()
    except ValueError:
        raise InvalidQueryError(f"{name} '{raw}' is not a valid ISO date.") from None


def _parse_flag(raw: Any) -> bool:
    """Query-string flags are only set by the literal ``true``."""
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    return str(raw).strip().lower() == "true"


def parse_query(
    template_id: Any,
    date_from: DateLike = None,
    date_to: DateLike = None,
    refresh: Any = False,
    no_cache: Any = False,
) -> AnalyticsQuery:
    """Validate raw request parameters into an :class:`AnalyticsQuery`.

    Raises
    ------
    InvalidQueryError
        If the template id is missing or not a UUID, a date is malformed, or
        ``date_from`` falls after ``date_to``.
    """
    query = AnalyticsQuery(
        template_id=_parse_template_id(template_id),
        date_from=_parse_date("date_from", date_from),
        date_to=_parse_date("date_to", date_to),
        refresh=_parse_flag(refresh),
        no_cache=_parse_flag(no_cache),
    )
    if query.date_from and query.date_to and query.date_from > query.date_to:
        raise InvalidQueryError("date_from must not be after date_to.")
    return query


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# ------------------------------------------------------------------
# Service
# ------------------------------------------------------------------


class AnalyticsService:
    """Request-level entry points: live analytics and detailed reports.

    Authentication, routing and rate limiting happen before these methods are
    called.  Store failures surface as :class:`DataFetchError`.
    """

    def __init__(
        self,
        templates: TemplateStore,
        responses: ResponseStore,
        cache: Optional[AnalyticsCache] = None,
        clock: Callable[[], datetime.datetime] = _utc_now,
    ):
        self._templates = templates
        self._responses = responses
        self._cache = cache if cache is not None else analytics_cache
        self._clock = clock

    @property
    def cache(self) -> AnalyticsCache:
        return self._cache

    def _load_template(self, template_id: str) -> SurveyTemplate:
        try:
            template = self._templates.get_template(template_id)
        except AnalyticsError:
            raise
        except Exception as exc:
            logger.error("Template store failed for %s: %s", template_id, exc, exc_info=True)
            raise DataFetchError(f"Failed to load template {template_id}.") from exc
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def _fetch(self, what: str, fetch: Callable[[], Any], template_id: str) -> Any:
        try:
            return fetch()
        except AnalyticsError:
            raise
        except Exception as exc:
            logger.error(
                "Fetching %s failed for template %s: %s", what, template_id, exc, exc_info=True
            )
            raise DataFetchError(f"Failed to fetch {what} for template {template_id}.") from exc

    def _compute_summary(self, query: AnalyticsQuery) -> Dict[str, Any]:
        template = self._load_template(query.template_id)
        responses = self._fetch(
            "responses",
            lambda: self._responses.list_responses(
                query.template_id, query.date_from, query.date_to
            ),
            query.template_id,
        )
        invitations = self._fetch(
            "invitations",
            lambda: self._responses.list_invitations(query.template_id),
            query.template_id,
        )
        return build_overview(responses, invitations, template=template).to_dict()

    def get_analytics(
        self,
        template_id: Any,
        date_from: DateLike = None,
        date_to: DateLike = None,
        refresh: Any = False,
        no_cache: Any = False,
    ) -> Dict[str, Any]:
        """Return the live summary of a template, served through the cache.

        ``refresh`` drops every cached entry of the template and recomputes;
        ``no_cache`` neither reads nor writes the cache for this call.
        """
        query = parse_query(template_id, date_from, date_to, refresh, no_cache)
        key = CacheKey(query.template_id, query.date_from, query.date_to)

        if query.refresh:
            logger.info("Refreshing analytics for template %s", query.template_id)
            self._cache.invalidate(query.template_id)

        entry = None
        if not (query.refresh or query.no_cache):
            entry = self._cache.get(*key)

        if entry is not None:
            result = copy.deepcopy(entry.result)
            calculated_at = entry.computed_at
            cached = True
        else:
            result = self._compute_summary(query)
            calculated_at = self._clock()
            cached = False
            if not query.no_cache:
                self._cache.put(key, copy.deepcopy(result))
            logger.info("Analytics calculated for template %s", query.template_id)

        result["meta"] = {
            "calculated_at": calculated_at.isoformat(),
            "cached": cached,
            "query_params": query.to_params(),
        }
        return result

    def _build_report(
        self, query: AnalyticsQuery
    ) -> Tuple[SurveyTemplate, DetailedReport, Dict[str, Any]]:
        template = self._load_template(query.template_id)
        responses: List[Any] = self._fetch(
            "responses",
            lambda: self._responses.list_responses(
                query.template_id, query.date_from, query.date_to
            ),
            query.template_id,
        )

        logger.info("Generating detailed analytics report for %s", query.template_id)
        report = generate_detailed_report(responses, template.questions)

        params = query.to_params()
        del params["refresh"], params["no_cache"]
        meta = {
            "generated_at": self._clock().isoformat(),
            "total_responses": len(responses),
            "query_params": params,
        }
        return template, report, meta

    def detailed_report(
        self,
        template_id: Any,
        date_from: DateLike = None,
        date_to: DateLike = None,
    ) -> Dict[str, Any]:
        """Compute the full question-level report; never cached.

        Raises
        ------
        InvalidQueryError
            If the parameters do not validate.
        TemplateNotFoundError
            If the template does not exist.
        DataFetchError
            If the store cannot be read.
        """
        query = parse_query(template_id, date_from, date_to)
        template, report, meta = self._build_report(query)
        return {
            "template": {
                "id": template.id,
                "name": template.name,
                "description": template.description,
            },
            "report": report.to_dict(),
            "meta": meta,
        }

    def detailed_report_markdown(
        self,
        template_id: Any,
        date_from: DateLike = None,
        date_to: DateLike = None,
    ) -> str:
        """Same as :meth:`detailed_report`, rendered as Markdown."""
        query = parse_query(template_id, date_from, date_to)
        template, report, meta = self._build_report(query)
        return render_report(report, template, meta)
