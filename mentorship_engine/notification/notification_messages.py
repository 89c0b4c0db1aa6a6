"""Builders for the user-facing notifications emitted by engine transitions."""

from mentorship_engine.common.mentorship_enums import NotificationType, ParticipantRole
from mentorship_engine.dto.notification_dto import NotificationDto


def cycle_launched(cycle, user_ids: list[int]) -> list[NotificationDto]:
    return [
        NotificationDto(
            type=NotificationType.CYCLE_LAUNCHED,
            recipient_id=user_id,
            title="Mentorship Cycle Launched",
            message=f"The mentorship cycle '{cycle.name}' is now open.",
            payload={"cycleId": cycle.cycle_id},
        )
        for user_id in user_ids
    ]


def match_proposed(match) -> list[NotificationDto]:
    payload = {"matchId": match.match_id, "cycleId": match.cycle_id}
    return [
        NotificationDto(
            type=NotificationType.MATCH_PROPOSED,
            recipient_id=user_id,
            title="New Mentorship Match",
            message="You have a new mentorship match waiting for your approval.",
            payload=payload,
        )
        for user_id in (match.mentor_id, match.mentee_id)
    ]


def match_rejected(match) -> list[NotificationDto]:
    payload = {"matchId": match.match_id, "cycleId": match.cycle_id}
    return [
        NotificationDto(
            type=NotificationType.MATCH_REJECTED,
            recipient_id=user_id,
            title="Mentorship Match Declined",
            message="A proposed mentorship match was declined.",
            payload=payload,
        )
        for user_id in (match.mentor_id, match.mentee_id)
    ]


def mentorship_status_changed(
    mentorship, notification_type: NotificationType
) -> list[NotificationDto]:
    """Notify both sides of a mentorship about a lifecycle transition."""
    titles = {
        NotificationType.MATCH_APPROVED: (
            "Mentorship Match Approved",
            "Your mentorship match has been approved.",
        ),
        NotificationType.MENTORSHIP_STARTED: (
            "Mentorship Started",
            "Your mentorship has started!",
        ),
        NotificationType.MENTORSHIP_COMPLETED: (
            "Mentorship Completed",
            "Congratulations on completing your mentorship!",
        ),
        NotificationType.MENTORSHIP_CANCELLED: (
            "Mentorship Cancelled",
            "Your mentorship has been cancelled.",
        ),
    }
    title, message = titles[notification_type]
    payload = {"mentorshipId": mentorship.mentorship_id, "cycleId": mentorship.cycle_id}
    return [
        NotificationDto(
            type=notification_type,
            recipient_id=user_id,
            title=title,
            message=message,
            payload=payload,
        )
        for user_id in (mentorship.mentor_id, mentorship.mentee_id)
    ]


def tasks_assigned(mentorship, week: int, task_count: int) -> list[NotificationDto]:
    return [
        NotificationDto(
            type=NotificationType.TASKS_ASSIGNED,
            recipient_id=mentorship.mentee_id,
            title=f"Week {week} Tasks",
            message=f"{task_count} new task(s) are waiting for you this week.",
            payload={"mentorshipId": mentorship.mentorship_id, "week": week},
        )
    ]


def certificate_issued(mentorship, certificate) -> list[NotificationDto]:
    return [
        NotificationDto(
            type=NotificationType.CERTIFICATE_ISSUED,
            recipient_id=user_id,
            title="Certificate Issued",
            message=f"Your certificate {certificate.certificate_number} is ready.",
            payload={
                "mentorshipId": mentorship.mentorship_id,
                "certificateNumber": certificate.certificate_number,
            },
        )
        for user_id in (mentorship.mentor_id, mentorship.mentee_id)
    ]


def onboarding(
    user_ids: list[int], role: ParticipantRole, cycle_id: int | None
) -> list[NotificationDto]:
    return [
        NotificationDto(
            type=NotificationType.ONBOARDING,
            recipient_id=user_id,
            title="Welcome to the Mentorship Program",
            message=f"Here is how to get started as a {role.value}.",
            payload={"role": role.value, "cycleId": cycle_id},
        )
        for user_id in user_ids
    ]
