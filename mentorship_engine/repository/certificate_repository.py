from mentorship_engine.entity.certificate_entity import CertificateEntity
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class CertificateRepository:
    """
    Repository for handling database operations related to CertificateEntity.
    """

    async def get_by_mentorship_id(
        self, session: AsyncSession, mentorship_id: int
    ) -> CertificateEntity | None:
        result = await session.execute(
            select(CertificateEntity).where(
                CertificateEntity.mentorship_id == mentorship_id
            )
        )

        return result.scalars().one_or_none()

    async def insert_certificate(
        self, session: AsyncSession, entity: CertificateEntity
    ) -> CertificateEntity:
        """
        Insert a new certificate.

        Raises:
            sqlalchemy.exc.IntegrityError: When the mentorship already holds a
                certificate or the number is taken.
        """
        session.add(entity)
        await session.flush()

        return entity
