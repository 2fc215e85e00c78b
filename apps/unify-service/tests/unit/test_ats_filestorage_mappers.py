from datetime import datetime, timezone

import pytest

from unify.db import models
from unify.unification.core import core_unification
from unify.verticals.ats.greenhouse import attachment_remote_id


def _unify(db, vertical, object_name, provider, source, connection_id, mappings=None):
    return core_unification.unify(
        db,
        source=source,
        vertical=vertical,
        object_name=object_name,
        provider=provider,
        connection_id=connection_id,
        custom_field_mappings=mappings,
    )


class TestGreenhouse:
    @pytest.fixture
    def conn(self, make_connection):
        return make_connection("greenhouse", "ats")

    def test_interview_unify(self, db_session, conn):
        [interview] = _unify(
            db_session,
            "ats",
            "interview",
            "greenhouse",
            {
                "id": 9001,
                "application_id": 42,
                "status": "awaiting_feedback",
                "interview": {"id": 12, "name": "Onsite"},
                "organizer": {"id": 3},
                "interviewers": [{"id": 5}, {"id": 6}],
                "start": {"date_time": "2024-04-01T14:00:00.000Z"},
                "end": {"date_time": "2024-04-01T15:00:00.000Z"},
                "location": "Room 1",
                "created_at": "2024-03-20T09:00:00Z",
                "custom_fields": {"panel": "backend"},
            },
            conn.id,
            mappings=[{"slug": "panel_name", "remote_id": "panel"}],
        )
        assert interview["remote_id"] == "9001"
        assert interview["status"] == "AWAITING_FEEDBACK"
        assert interview["application_id"] == "42"
        assert interview["job_interview_stage_id"] == "12"
        assert interview["organized_by"] == "3"
        assert interview["interviewers"] == ["5", "6"]
        assert interview["start_at"] == datetime(2024, 4, 1, 14, tzinfo=timezone.utc)
        assert interview["field_mappings"] == {"panel_name": "backend"}

    def test_interview_desunify_moves_organizer_to_on_behalf_of(self, db_session, conn):
        payload = core_unification.desunify(
            db_session,
            source={
                "application_id": "42",
                "job_interview_stage_id": "12",
                "interviewers": ["5"],
                "organized_by": "3",
                "start_at": "2024-04-01T14:00:00Z",
                "end_at": "2024-04-01T15:00:00Z",
            },
            vertical="ats",
            object_name="interview",
            provider="greenhouse",
        )
        assert payload["on_behalf_of"] == "3"
        assert payload["interviewers"] == [{"user_id": "5", "response_status": "needs_action"}]
        assert payload["start"] == {"date_time": "2024-04-01T14:00:00Z"}

    def test_scorecard_links_interview_by_application_and_time(self, db_session, conn):
        interview = models.AtsInterview(
            remote_id="9001",
            application_id="42",
            start_at=datetime(2024, 4, 1, 14, tzinfo=timezone.utc),
            connection_id=conn.id,
        )
        db_session.add(interview)
        db_session.commit()

        matched, unmatched = _unify(
            db_session,
            "ats",
            "scorecard",
            "greenhouse",
            [
                {"id": 1, "application_id": 42, "interviewed_at": "2024-04-01T14:00:00Z", "overall_recommendation": "strong_yes"},
                {"id": 2, "application_id": 42, "interviewed_at": "2024-04-02T14:00:00Z", "overall_recommendation": "definitely_not"},
            ],
            conn.id,
        )
        assert matched["interview_id"] == interview.id
        assert matched["overall_recommendation"] == "STRONG_YES"
        assert unmatched["interview_id"] is None
        assert unmatched["overall_recommendation"] == "DEFINITELY_NO"

    def test_attachment_remote_id(self):
        assert attachment_remote_id({"id": 7}) == "7"
        assert (
            attachment_remote_id({"candidate_id": 5, "filename": "cv.pdf", "created_at": "2024-01-01T00:00:00Z"})
            == "5:cv.pdf:2024-01-01T00:00:00Z"
        )
        assert attachment_remote_id({"filename": "cv.pdf"}) is None

    def test_attachment_unify(self, db_session, conn):
        [attachment] = _unify(
            db_session,
            "ats",
            "attachment",
            "greenhouse",
            {"candidate_id": 5, "filename": "offer.pdf", "url": "https://files/offer.pdf", "type": "offer_packet"},
            conn.id,
        )
        assert attachment["file_type"] == "OFFER_LETTER"
        assert attachment["candidate_id"] == "5"
        assert attachment["remote_id"] == "5:offer.pdf:"


class TestBox:
    @pytest.fixture
    def conn(self, make_connection):
        return make_connection("box", "filestorage")

    def test_folder_unify_keeps_parent_remote_id(self, db_session, conn):
        top, child = _unify(
            db_session,
            "filestorage",
            "folder",
            "box",
            [
                {"id": "11", "name": "Top", "parent": {"id": "0"}, "size": 10},
                {"id": "12", "name": "Child", "parent": {"id": "11"}, "shared_link": {"url": "https://box/s/x", "effective_access": "open"}},
            ],
            conn.id,
        )
        assert top["parent_folder_remote_id"] is None
        assert top["folder_url"] == "https://app.box.com/folder/11"
        assert child["parent_folder_remote_id"] == "11"
        assert child["shared_link"] == "https://box/s/x"
        assert child["permission"] == "open"

    def test_folder_desunify_defaults_to_root(self, db_session, conn):
        payload = core_unification.desunify(
            db_session, source={"name": "New"}, vertical="filestorage", object_name="folder", provider="box"
        )
        assert payload == {"name": "New", "parent": {"id": "0"}}

    def test_folder_desunify_resolves_parent(self, db_session, conn):
        parent = models.FsFolder(name="Top", remote_id="11", connection_id=conn.id)
        db_session.add(parent)
        db_session.commit()
        payload = core_unification.desunify(
            db_session,
            source={"name": "New", "parent_folder_id": str(parent.id), "description": "d"},
            vertical="filestorage",
            object_name="folder",
            provider="box",
        )
        assert payload == {"name": "New", "parent": {"id": "11"}, "description": "d"}

    def test_group_members(self, db_session, conn):
        [group] = _unify(
            db_session,
            "filestorage",
            "group",
            "box",
            {"id": 3, "name": "Eng", "memberships": [{"user": {"login": "a@x.io"}}, {"user": {"id": 9}}, {"user": {}}]},
            conn.id,
        )
        assert group["users"] == ["a@x.io", "9"]
        assert group["remote_was_deleted"] is None
