import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from omnipply.exceptions import BackendException, BackendRPCError, OperationFailedError
from omnipply.schemas.advertising import (
    AdvertiseRequest,
    CampaignQuoteResponse,
    CampaignRequest,
    CampaignSubmitResponse,
    QuoteLine,
    SubmissionFailure,
)
from omnipply.schemas.forms import FormType
from omnipply.services.backend.client import BackendClient, in_, is_null
from omnipply.services.forms import FormsService
from omnipply.services.pricing import (
    PRESET_LABELS,
    DurationPreset,
    TargetType,
    quote_campaign,
    resolve_hide_after,
    time_remaining,
)
from omnipply.utils.dates import to_iso_midnight, to_local_date, utcnow

logger = logging.getLogger(__name__)

MAX_PARALLEL_SUBMISSIONS = 8
PUBLIC_PROGRAMS = "(is_private.is.null,is_private.eq.false)"


def programs_open_on(programs: List[Dict[str, Any]], today: date) -> List[Dict[str, Any]]:
    """Programs closing today or later; programs without a close date are dropped."""
    kept = []
    for program in programs:
        close = to_local_date(program.get("close_at"))
        if close is not None and close >= today:
            kept.append(program)
    return kept


def campaign_programs(request: CampaignRequest, programs: List[Dict[str, Any]], today: date) -> List[Dict[str, Any]]:
    """Programs a campaign actually features; ``until_deadline`` only runs for open programs."""
    if request.duration_preset != DurationPreset.UNTIL_DEADLINE:
        return list(programs)
    return programs_open_on(programs, today)


def build_submissions(
    request: CampaignRequest,
    programs: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Advertise form payloads, one for the organization and one per selected program."""
    today = today or utcnow().date()
    programs = campaign_programs(request, programs, today)
    if request.duration_preset == DurationPreset.UNTIL_DEADLINE and not programs:
        raise ValueError("Selected programs must have future deadlines for 'Until deadline' option.")

    hide_after = resolve_hide_after(
        request.duration_preset,
        request.show_from,
        request.hide_after,
        [p.get("close_at") for p in programs],
        today,
    )
    if hide_after is None:
        raise ValueError("Please choose when the campaign should end.")

    notes = (request.notes or "").strip() or None
    common = {
        "organization_id": request.organization_id,
        "organization_slug": request.organization_slug or None,
        "organization_name": request.organization_name,
        "show_from": to_iso_midnight(request.show_from),
        "duration_preset": request.duration_preset.value,
        "notes": notes,
    }

    payloads = []
    if request.include_org:
        payloads.append(
            {
                "target_type": TargetType.ORG.value,
                **common,
                "program_id": None,
                "program_name": None,
                "hide_after": to_iso_midnight(hide_after),
            }
        )

    if request.include_programs:
        for program in programs:
            program_hide_after = hide_after
            if request.duration_preset == DurationPreset.UNTIL_DEADLINE:
                program_hide_after = to_local_date(program["close_at"])
            payloads.append(
                {
                    "target_type": TargetType.PROGRAM.value,
                    **common,
                    "program_id": program["id"],
                    "program_name": program.get("name"),
                    "hide_after": to_iso_midnight(program_hide_after),
                }
            )
    return payloads


class AdvertiseService:
    def __init__(self, backend: BackendClient, forms: FormsService):
        self._backend = backend
        self._forms = forms

    def selected_programs(self, request: CampaignRequest) -> List[Dict[str, Any]]:
        if not request.include_programs or not request.program_ids:
            return []
        rows = self._backend.select(
            "programs",
            columns="id,name,close_at",
            filters={
                "id": in_(request.program_ids),
                "organization_id": f"eq.{request.organization_id}",
                "deleted_at": is_null(),
                "or": PUBLIC_PROGRAMS,
            },
        )
        # keep the caller's order
        by_id = {str(row["id"]): row for row in rows}
        return [by_id[pid] for pid in request.program_ids if pid in by_id]

    def quote(self, request: CampaignRequest, today: Optional[date] = None) -> CampaignQuoteResponse:
        today = today or utcnow().date()
        programs = campaign_programs(request, self.selected_programs(request), today)
        hide_after = resolve_hide_after(
            request.duration_preset,
            request.show_from,
            request.hide_after,
            [p.get("close_at") for p in programs],
            today,
        )
        quote = quote_campaign(request.duration_preset, request.show_from, hide_after, request.include_org, programs)
        return CampaignQuoteResponse(
            duration_preset=request.duration_preset,
            duration_label=PRESET_LABELS[request.duration_preset],
            show_from=request.show_from,
            hide_after=hide_after,
            org_price=quote.org_price,
            program_price=quote.program_price,
            total=quote.total,
            lines=[QuoteLine(program_id=l.program_id, price=l.price, close_at=l.close_at) for l in quote.lines],
        )

    def submit(
        self, request: CampaignRequest, user_id: Optional[str] = None, today: Optional[date] = None
    ) -> CampaignSubmitResponse:
        """Submit every payload together and report which ones failed."""
        programs = self.selected_programs(request)
        if request.include_programs and not programs:
            raise ValueError("Please select at least one program to feature.")
        payloads = build_submissions(request, programs, today)

        def send(payload: Dict[str, Any]):
            try:
                return self._forms.submit_form(FormType.ADVERTISE.value, payload, user_id), None
            except BackendException as e:
                logger.error(f"Advertise submission failed: {payload['target_type']} {payload['program_id']}: {e}")
                return None, SubmissionFailure(
                    target_type=payload["target_type"], program_id=payload["program_id"], error=str(e)
                )

        workers = max(1, min(MAX_PARALLEL_SUBMISSIONS, len(payloads)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(send, payloads))

        response = CampaignSubmitResponse()
        for submitted, failure in results:
            if submitted is not None:
                response.submitted.append(submitted)
            if failure is not None:
                response.failures.append(failure)
        logger.info(
            f"Advertise request for org {request.organization_id}: "
            f"{len(response.submitted)} submitted, {len(response.failures)} failed"
        )
        return response

    def list_requests(self, org_id: str, now: Optional[datetime] = None) -> List[AdvertiseRequest]:
        """Advertise requests made by an organization, with how long each placement still runs."""
        try:
            rows = self._backend.rpc("org_list_advertise_requests_v1", {"p_org_id": org_id})
        except BackendRPCError as e:
            raise OperationFailedError(f"Failed to load advertise requests: {e.message}") from e
        requests = []
        for row in rows or []:
            request = AdvertiseRequest.model_validate(row)
            request.time_remaining = time_remaining(request.form_data.get("hide_after"), now)
            requests.append(request)
        return requests
