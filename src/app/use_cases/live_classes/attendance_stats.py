"""Live class attendance history and subscription statistics"""

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple
from libs.result import Result, Return, Error
from src.app.repositories.live_class_repository import LiveClassRepository
from src.app.repositories.platform_repository import UserRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.domain.platform import UserRole
from src.domain.subscription import add_months
from .dtos import (
    AttendedSessionDTO,
    UserAttendedSessionsDTO,
    TopAttendeeDTO,
    LiveClassSubscriptionStatsDTO,
)

logger = logging.getLogger(__name__)

TOP_ATTENDEES_LIMIT = 10


def month_bounds(month: Optional[str], now: datetime) -> Tuple[str, datetime, datetime]:
    """
    Resolve a YYYY-MM label to its [start, end) window

    Defaults to the month containing now. Raises ValueError on a malformed label.
    """
    if month:
        start = datetime.strptime(month, "%Y-%m")
    else:
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start.strftime("%Y-%m"), start, add_months(start, 1)


def _invalid_month(month: str) -> Error:
    return Error(
        code="INVALID_MONTH",
        message=f"Month must be formatted as YYYY-MM: {month}",
    )


def _hours(minutes: int) -> float:
    return round(minutes / 60, 2)


class ListUserAttendedSessions:
    """
    Use Case: Sessions a user joined in a month

    A session belongs to the month its start_time falls in. Sessions are
    listed in join order; last_attendance is the start of the latest one.
    """

    def __init__(self, live_class_repo: LiveClassRepository):
        self.live_class_repo = live_class_repo

    async def execute(
        self,
        user_id: str,
        month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[UserAttendedSessionsDTO]:
        try:
            label, start, end = month_bounds(month, now or datetime.utcnow())
        except ValueError:
            return Return.err(_invalid_month(month))

        try:
            rows = await self.live_class_repo.list_attendance_between(start, end, user_id=user_id)

            sessions = []
            for participant, session in rows:
                minutes = int((session.end_time - session.start_time).total_seconds() // 60)
                sessions.append(
                    AttendedSessionDTO(
                        session_id=session.id,
                        title=session.title,
                        start_time=session.start_time,
                        duration_minutes=minutes,
                        duration_hours=_hours(minutes),
                        quota_used=participant.quota_used,
                        joined_at=participant.joined_at,
                    )
                )

            return Return.ok(
                UserAttendedSessionsDTO(
                    user_id=user_id,
                    month=label,
                    sessions=sessions,
                    total_hours=_hours(sum(s.duration_minutes for s in sessions)),
                    last_attendance=sessions[-1].start_time if sessions else None,
                )
            )

        except Exception as e:
            logger.error(f"Error listing attended sessions for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="ATTENDED_SESSIONS_FAILED",
                    message="Failed to list attended sessions",
                    reason=str(e),
                )
            )


class GetLiveClassSubscriptionStatistics:
    """
    Use Case: Monthly live class consumption across subscribers

    Hours come from session length. Top users are ranked by hours, at most
    ten; users that no longer exist are reported as "Unknown".
    """

    def __init__(
        self,
        live_class_repo: LiveClassRepository,
        user_repo: UserRepository,
        subscription_repo: StudentSubscriptionRepository,
    ):
        self.live_class_repo = live_class_repo
        self.user_repo = user_repo
        self.subscription_repo = subscription_repo

    async def execute(
        self,
        month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[LiveClassSubscriptionStatsDTO]:
        try:
            label, start, end = month_bounds(month, now or datetime.utcnow())
        except ValueError:
            return Return.err(_invalid_month(month))

        try:
            # Step 1: Minutes and sessions per user
            minutes_by_user: Dict[str, int] = {}
            sessions_by_user: Dict[str, int] = {}
            rows = await self.live_class_repo.list_attendance_between(start, end)
            for participant, session in rows:
                minutes = int((session.end_time - session.start_time).total_seconds() // 60)
                user_id = participant.user_id
                minutes_by_user[user_id] = minutes_by_user.get(user_id, 0) + minutes
                sessions_by_user[user_id] = sessions_by_user.get(user_id, 0) + 1

            # Step 2: Rank attendees
            ranked = sorted(minutes_by_user.items(), key=lambda item: item[1], reverse=True)
            ranked = ranked[:TOP_ATTENDEES_LIMIT]
            users = await self.user_repo.get_by_ids([user_id for user_id, _ in ranked])
            names = {user.id: user.name for user in users}
            top_users = [
                TopAttendeeDTO(
                    user_id=user_id,
                    user_name=names.get(user_id, "Unknown"),
                    hours_used=_hours(minutes),
                    sessions_attended=sessions_by_user[user_id],
                )
                for user_id, minutes in ranked
            ]

            # Step 3: Totals
            total_minutes = sum(minutes_by_user.values())
            active_users = len(minutes_by_user)

            return Return.ok(
                LiveClassSubscriptionStatsDTO(
                    month=label,
                    total_students=await self.user_repo.count_by_role(UserRole.STUDENT),
                    active_users=active_users,
                    total_hours_used=_hours(total_minutes),
                    average_hours_used=(
                        round(total_minutes / 60 / active_users, 2) if active_users else 0.0
                    ),
                    subscription_distribution=await self.subscription_repo.active_plan_counts(),
                    top_users=top_users,
                )
            )

        except Exception as e:
            logger.error(f"Error getting live class subscription statistics for {label}: {e}")
            return Return.err(
                Error(
                    code="LIVE_CLASS_STATS_FAILED",
                    message="Failed to get live class subscription statistics",
                    reason=str(e),
                )
            )
