# Routes are mounted under the "/api" prefix by FastAppFactory.
CYCLES_ENDPOINT = "/mentorship/cycles"
CYCLE_ENDPOINT = "/mentorship/cycles/{cycle_id}"
CYCLE_LAUNCH_ENDPOINT = "/mentorship/cycles/{cycle_id}/launch"
CYCLE_COMPLETE_ENDPOINT = "/mentorship/cycles/{cycle_id}/complete"
CYCLE_INTERESTS_ENDPOINT = "/mentorship/cycles/{cycle_id}/interests"
CYCLE_MATCHING_ENDPOINT = "/mentorship/cycles/{cycle_id}/matching"

AVAILABILITY_ENDPOINT = "/mentorship/availability"
ASSIGNMENTS_ENDPOINT = "/mentorship/assignments"

MATCHES_ENDPOINT = "/mentorship/matches"
MATCHES_APPROVE_ENDPOINT = "/mentorship/matches/approve"
MATCH_APPROVE_ENDPOINT = "/mentorship/matches/{match_id}/approve"
MATCH_REJECT_ENDPOINT = "/mentorship/matches/{match_id}/reject"

ONBOARDING_NOTIFICATIONS_ENDPOINT = "/mentorship/onboarding/notifications"

MENTORSHIPS_ENDPOINT = "/mentorship/mentorships"
MENTORSHIP_ENDPOINT = "/mentorship/mentorships/{mentorship_id}"
MENTORSHIP_START_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/start"
MENTORSHIP_SESSIONS_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/sessions"
MENTORSHIP_COMPLETE_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/complete"
MENTORSHIP_CANCEL_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/cancel"
MENTORSHIP_PROGRAMS_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/programs"
MENTORSHIP_TASKS_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/tasks"
MENTORSHIP_PROGRESS_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/progress"
MENTORSHIP_WEEK_PROGRESS_ENDPOINT = (
    "/mentorship/mentorships/{mentorship_id}/progress/{week}"
)
MENTORSHIP_EVALUATIONS_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/evaluations"
MENTORSHIP_CERTIFICATE_ENDPOINT = "/mentorship/mentorships/{mentorship_id}/certificate"

PROGRAM_ADVANCE_ENDPOINT = "/mentorship/programs/{program_id}/advance"
PROGRAM_COMPLETE_ENDPOINT = "/mentorship/programs/{program_id}/complete"
PROGRAM_TASKS_ENDPOINT = "/mentorship/programs/{program_id}/tasks"
TASK_START_ENDPOINT = "/mentorship/tasks/{task_id}/start"
TASK_COMPLETE_ENDPOINT = "/mentorship/tasks/{task_id}/complete"

PROGRESS_ENDPOINT = "/mentorship/progress"
ANALYTICS_ENDPOINT = "/mentorship/analytics"

MENTOR_PROFILE_ENDPOINT = "/mentorship/profiles/mentors/{profile_user_id}"
MENTOR_PROFILE_VERIFY_ENDPOINT = "/mentorship/profiles/mentors/{profile_user_id}/verify"
MENTEE_PROFILE_ENDPOINT = "/mentorship/profiles/mentees/{profile_user_id}"
MENTEE_SUGGESTIONS_ENDPOINT = (
    "/mentorship/profiles/mentees/{profile_user_id}/suggestions"
)
