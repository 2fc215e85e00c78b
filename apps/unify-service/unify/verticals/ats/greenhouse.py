"""
Greenhouse Harvest API: adapters and mappers for interviews, scorecards and
candidate attachments.
"""
from __future__ import annotations

import base64
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from unify.db import models
from unify.providers.base import ApiResponse, ProviderClient, get_registry
from unify.unification import lookups
from unify.unification.core import as_list
from unify.unification.registry import mappers_registry
from unify.utils.dates import parse_datetime, to_iso

logger = logging.getLogger(__name__)

PROVIDER = "greenhouse"
_PAGE_SIZE = 500

INTERVIEW_STATUS_IN = {
    "scheduled": "SCHEDULED",
    "awaiting_feedback": "AWAITING_FEEDBACK",
    "complete": "COMPLETED",
}

RECOMMENDATION_IN = {
    "definitely_not": "DEFINITELY_NO",
    "no": "NO",
    "yes": "YES",
    "strong_yes": "STRONG_YES",
    "no_decision": "NO_DECISION",
}


class GreenhouseClient(ProviderClient):
    provider = PROVIDER
    default_base_url = "https://harvest.greenhouse.io/v1"

    def auth_headers(self) -> Dict[str, str]:
        # Harvest uses the API key as the basic-auth username with an empty password
        raw = f"{self.access_token}:".encode("utf-8")
        return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}

    def list_all(self, path: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for page in self.paginate_link_header(path, params={"per_page": _PAGE_SIZE}):
            items.extend(page or [])
        return items


# ---- adapters ----

class GreenhouseInterviewService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = GreenhouseClient(connection).list_all("/scheduled_interviews")
        logger.info("Synced greenhouse interviews: %d", len(data))
        return ApiResponse(data=data, message="Greenhouse interviews retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body = dict(payload)
        on_behalf_of = body.pop("on_behalf_of", None)
        headers = {"On-Behalf-Of": str(on_behalf_of)} if on_behalf_of else {}
        data, response = GreenhouseClient(connection).post_json("/scheduled_interviews", body, headers=headers)
        return ApiResponse(data=data, message="Greenhouse interview created", status_code=response.status_code)


class GreenhouseScoreCardService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        data = GreenhouseClient(connection).list_all("/scorecards")
        logger.info("Synced greenhouse scorecards: %d", len(data))
        return ApiResponse(data=data, message="Greenhouse scorecards retrieved", status_code=200)


class GreenhouseAttachmentService:
    def sync(self, connection: models.Connection, remote_properties: List[str]) -> ApiResponse:
        """Attachments are nested in candidates; flatten them with their candidate id."""
        candidates = GreenhouseClient(connection).list_all("/candidates")
        data = []
        for candidate in candidates:
            for attachment in candidate.get("attachments") or []:
                data.append({**attachment, "candidate_id": candidate.get("id")})
        logger.info("Synced greenhouse attachments: %d", len(data))
        return ApiResponse(data=data, message="Greenhouse attachments retrieved", status_code=200)

    def add(self, connection: models.Connection, payload: Dict[str, Any]) -> ApiResponse:
        body = dict(payload)
        candidate_id = body.pop("candidate_id", None)
        on_behalf_of = body.pop("on_behalf_of", None)
        headers = {"On-Behalf-Of": str(on_behalf_of)} if on_behalf_of else {}
        data, response = GreenhouseClient(connection).post_json(
            f"/candidates/{candidate_id}/attachments", body, headers=headers
        )
        return ApiResponse(
            data={**data, "candidate_id": candidate_id},
            message="Greenhouse attachment created",
            status_code=response.status_code,
        )


# ---- mappers ----

def _custom_fields_out(field_mappings: Optional[Dict[str, Any]], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
    by_slug = {m["slug"]: m["remote_id"] for m in custom_field_mappings}
    return {by_slug[slug]: value for slug, value in (field_mappings or {}).items() if slug in by_slug}


def _custom_fields_in(source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
    custom = source.get("custom_fields") or {}
    result = {}
    for mapping in custom_field_mappings:
        key = mapping["remote_id"]
        if key in custom:
            result[mapping["slug"]] = custom[key]
        elif key in source:
            result[mapping["slug"]] = source[key]
    return result


class GreenhouseInterviewMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "application_id": source.get("application_id"),
            "interview_id": source.get("job_interview_stage_id"),
            "interviewers": [{"user_id": uid, "response_status": "needs_action"} for uid in source.get("interviewers") or []],
            "start": {"date_time": to_iso(source.get("start_at"))},
            "end": {"date_time": to_iso(source.get("end_at"))},
        }
        if source.get("location"):
            result["location"] = source["location"]
        if source.get("organized_by"):
            result["on_behalf_of"] = source["organized_by"]
        custom = _custom_fields_out(source.get("field_mappings"), custom_field_mappings)
        if custom:
            result["custom_fields"] = custom
        return result

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [self._map_one(item, custom_field_mappings) for item in as_list(source)]

    def _map_one(self, interview: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        organizer = interview.get("organizer") or {}
        stage = interview.get("interview") or {}
        return {
            "remote_id": str(interview["id"]) if interview.get("id") is not None else None,
            "status": INTERVIEW_STATUS_IN.get((interview.get("status") or "").lower()),
            "application_id": str(interview["application_id"]) if interview.get("application_id") is not None else None,
            "job_interview_stage_id": str(stage["id"]) if stage.get("id") is not None else None,
            "organized_by": str(organizer["id"]) if organizer.get("id") is not None else None,
            "interviewers": [str(i["id"]) for i in interview.get("interviewers") or [] if i.get("id") is not None],
            "location": interview.get("location"),
            "start_at": parse_datetime((interview.get("start") or {}).get("date_time") or (interview.get("start") or {}).get("date")),
            "end_at": parse_datetime((interview.get("end") or {}).get("date_time") or (interview.get("end") or {}).get("date")),
            "remote_created_at": parse_datetime(interview.get("created_at")),
            "remote_updated_at": parse_datetime(interview.get("updated_at")),
            "field_mappings": _custom_fields_in(interview, custom_field_mappings),
        }


class GreenhouseScoreCardMapper:
    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        # Harvest has no endpoint to create scorecards
        return {}

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [self._map_one(db, item, connection_id, custom_field_mappings) for item in as_list(source)]

    def _map_one(self, db: Session, scorecard: Dict[str, Any], connection_id: uuid.UUID, custom_field_mappings) -> Dict[str, Any]:
        application_id = str(scorecard["application_id"]) if scorecard.get("application_id") is not None else None
        interviewed_at = parse_datetime(scorecard.get("interviewed_at"))
        return {
            "remote_id": str(scorecard["id"]) if scorecard.get("id") is not None else None,
            "overall_recommendation": RECOMMENDATION_IN.get((scorecard.get("overall_recommendation") or "").lower()),
            "application_id": application_id,
            "interview_id": lookups.interview_id_for_application(db, application_id, interviewed_at, connection_id),
            "remote_created_at": parse_datetime(scorecard.get("created_at")),
            "submitted_at": parse_datetime(scorecard.get("submitted_at")),
            "field_mappings": _custom_fields_in(scorecard, custom_field_mappings),
        }


def attachment_remote_id(attachment: Dict[str, Any]) -> Optional[str]:
    """Harvest attachments carry no id; derive a stable one from candidate, name and upload time."""
    if attachment.get("id") is not None:
        return str(attachment["id"])
    if not attachment.get("filename") or attachment.get("candidate_id") is None:
        return None
    return f"{attachment['candidate_id']}:{attachment['filename']}:{attachment.get('created_at') or ''}"


class GreenhouseAttachmentMapper:
    FILE_TYPES_IN = {
        "resume": "RESUME",
        "cover_letter": "COVER_LETTER",
        "offer_letter": "OFFER_LETTER",
        "offer_packet": "OFFER_LETTER",
    }

    def desunify(self, db: Session, source: Dict[str, Any], custom_field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
        file_type = (source.get("file_type") or "other").lower()
        return {
            "candidate_id": source.get("candidate_id"),
            "filename": source.get("file_name"),
            "type": file_type if file_type in {"resume", "cover_letter", "admin_only", "take_home_test", "offer_packet", "offer_letter", "other"} else "other",
            "url": source.get("file_url"),
        }

    def unify(self, db: Session, source: Any, connection_id: uuid.UUID, custom_field_mappings: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        results = []
        for attachment in as_list(source):
            results.append({
                "remote_id": attachment_remote_id(attachment),
                "file_url": attachment.get("url"),
                "file_name": attachment.get("filename"),
                "file_type": self.FILE_TYPES_IN.get((attachment.get("type") or "").lower(), (attachment.get("type") or "").upper() or None),
                "candidate_id": str(attachment["candidate_id"]) if attachment.get("candidate_id") is not None else None,
                "remote_created_at": parse_datetime(attachment.get("created_at")),
                "remote_modified_at": parse_datetime(attachment.get("updated_at") or attachment.get("created_at")),
                "remote_was_deleted": False,
                "field_mappings": _custom_fields_in(attachment, custom_field_mappings),
            })
        return results


def register() -> None:
    get_registry("ats", "interview").register(PROVIDER, GreenhouseInterviewService())
    get_registry("ats", "scorecard").register(PROVIDER, GreenhouseScoreCardService())
    get_registry("ats", "attachment").register(PROVIDER, GreenhouseAttachmentService())
    mappers_registry.register("ats", "interview", PROVIDER, GreenhouseInterviewMapper())
    mappers_registry.register("ats", "scorecard", PROVIDER, GreenhouseScoreCardMapper())
    mappers_registry.register("ats", "attachment", PROVIDER, GreenhouseAttachmentMapper())
