from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.constants import CERTIFICATE_NUMBER_TEMPLATE
from mentorship_engine.common.mentorship_enums import MentorshipStatus
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.evaluation_dto import CertificateDto
from mentorship_engine.entity.certificate_entity import CertificateEntity
from mentorship_engine.notification import notification_messages


def build_certificate_number(mentorship_id: int, issued_at: datetime) -> str:
    """
    Compose a certificate number from the UTC issue time and the mentorship id.

    Numbers are unique because a mentorship holds at most one certificate and
    mentorship ids are unique.
    """
    return CERTIFICATE_NUMBER_TEMPLATE.format(
        issued=issued_at.astimezone(timezone.utc), mentorship_id=mentorship_id
    )


class CertificateService:
    """Issues the completion certificate of a mentorship, exactly once."""

    def __init__(
        self, logger, mentorship_repository, certificate_repository, notification_publisher
    ):
        self.logger = logger
        self.mentorship_repository = mentorship_repository
        self.certificate_repository = certificate_repository
        self.notification_publisher = notification_publisher

    async def issue_certificate(
        self, session: AsyncSession, mentorship_id: int
    ) -> CertificateDto:
        """
        Issue the certificate of a completed mentorship.

        The certificate row is unique per mentorship and the link on the
        mentorship is only written while it is empty, so concurrent calls issue
        a single certificate.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is not completed.
            DuplicateError: A certificate was already issued.
            ConflictError: A concurrent call linked another certificate first.
        """
        mentorship = await self.mentorship_repository.get_mentorship_by_id(
            session=session, mentorship_id=mentorship_id
        )
        if not mentorship:
            raise NotFoundError("Mentorship", mentorship_id)
        if mentorship.status != MentorshipStatus.COMPLETED:
            raise PreconditionFailedError(
                f"Mentorship {mentorship_id} is {mentorship.status.value}; "
                "certificates are only issued for completed mentorships."
            )
        if mentorship.certificate_id is not None or (
            await self.certificate_repository.get_by_mentorship_id(
                session=session, mentorship_id=mentorship_id
            )
        ):
            raise DuplicateError(
                f"Mentorship {mentorship_id} already has a certificate."
            )

        issued_at = datetime.now(timezone.utc)
        try:
            certificate = await self.certificate_repository.insert_certificate(
                session=session,
                entity=CertificateEntity(
                    mentorship_id=mentorship_id,
                    certificate_number=build_certificate_number(mentorship_id, issued_at),
                    issued_at=issued_at,
                ),
            )
        except IntegrityError as e:
            raise DuplicateError(
                f"Mentorship {mentorship_id} already has a certificate."
            ) from e

        if not await self.mentorship_repository.link_certificate(
            session=session,
            mentorship_id=mentorship_id,
            certificate_id=certificate.certificate_id,
        ):
            raise ConflictError(
                f"Mentorship {mentorship_id} was linked to another certificate concurrently."
            )
        await session.commit()

        self.logger.info(
            "[CertificateService] certificate %s issued for mentorship %s.",
            certificate.certificate_number,
            mentorship_id,
        )
        await self.notification_publisher.publish(
            notification_messages.certificate_issued(mentorship, certificate)
        )
        return CertificateDto.model_validate(certificate)

    async def get_certificate(
        self, session: AsyncSession, mentorship_id: int
    ) -> CertificateDto:
        certificate = await self.certificate_repository.get_by_mentorship_id(
            session=session, mentorship_id=mentorship_id
        )
        if not certificate:
            raise NotFoundError("Certificate of mentorship", mentorship_id)
        return CertificateDto.model_validate(certificate)
