"""
Translation service.

Works over every translation table through the ``TRANSLATION_TABLES``
registry: CRUD for translation rows, overlaying translated text on read
models, and coverage statistics.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from usogui_db.core.database.entities.translations import (
    TRANSLATION_TABLES,
    TranslationBase,
    TranslationTable,
)
from usogui_db.core.database.repositories.translations import TranslationRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.translations import (
    EntityTypeCoverage,
    TranslationCreate,
    TranslationRead,
    TranslationStats,
    TranslationUpdate,
)

logger = get_logger(__name__)

ReadModel = TypeVar("ReadModel", bound=BaseModel)


class TranslationError(Exception):
    """Base class for translation failures the API maps to HTTP errors."""


class ParentNotFoundError(TranslationError):
    """The entity being translated does not exist."""


class DuplicateTranslationError(TranslationError):
    """A translation for this entity and language already exists."""


class InvalidTranslationFieldError(TranslationError):
    """The translated fields cannot be stored."""


class UnknownTranslationFieldError(InvalidTranslationFieldError):
    """The payload names a field the entity does not translate."""


class TranslationTooLongError(InvalidTranslationFieldError):
    """A translated value exceeds the column length."""


class TranslationService:
    """Translation CRUD and localization for all translatable entities."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _repository(self, entity_type: TranslatableEntity) -> TranslationRepository:
        return TranslationRepository(self.session, TRANSLATION_TABLES[entity_type])

    @staticmethod
    def to_read(entity_type: TranslatableEntity, row: TranslationBase) -> TranslationRead:
        table = TRANSLATION_TABLES[entity_type]
        return TranslationRead(
            id=row.id,
            entity_type=entity_type.value,
            entity_id=row.entity_id,
            language=row.language,
            translated={name: getattr(row, name) for name in table.fields},
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _check_fields(table: TranslationTable, translated: Dict[str, Optional[str]]) -> None:
        unknown = sorted(set(translated) - set(table.fields))
        if unknown:
            raise UnknownTranslationFieldError(
                f"Unknown translated fields: {', '.join(unknown)} (allowed: {', '.join(table.fields)})"
            )
        for name, value in translated.items():
            max_length = getattr(table.model.__table__.c[name].type, "length", None)
            if value is not None and max_length is not None and len(value) > max_length:
                raise TranslationTooLongError(f"Translated {name} must be at most {max_length} characters")

    async def list_for_entity(self, entity_type: TranslatableEntity, entity_id: int) -> List[TranslationRead]:
        rows = await self._repository(entity_type).for_entity(entity_id)
        return [self.to_read(entity_type, row) for row in rows]

    async def get(
        self, entity_type: TranslatableEntity, entity_id: int, language: Language
    ) -> Optional[TranslationRead]:
        row = await self._repository(entity_type).get_for(entity_id, language)
        return self.to_read(entity_type, row) if row else None

    async def create(self, entity_type: TranslatableEntity, payload: TranslationCreate) -> TranslationRead:
        """
        Create a translation row.

        Raises:
            UnknownTranslationFieldError: Payload names a non-translated field
            TranslationTooLongError: A value exceeds its column length
            ParentNotFoundError: The entity does not exist
            DuplicateTranslationError: The entity already has this language
        """
        repository = self._repository(entity_type)
        table = repository.table
        self._check_fields(table, payload.translated)

        if not await repository.parent_exists(payload.entity_id):
            raise ParentNotFoundError(f"{entity_type.value.capitalize()} {payload.entity_id} not found")
        if await repository.get_for(payload.entity_id, payload.language):
            raise DuplicateTranslationError(
                f"{entity_type.value.capitalize()} {payload.entity_id} already has a "
                f"'{payload.language.value}' translation"
            )

        row = table.model(entity_id=payload.entity_id, language=payload.language, **payload.translated)
        row = await repository.create(row)
        logger.info(
            f"Created {entity_type.value} translation {row.id} ({payload.language.value})",
            extra={"entity_type": entity_type.value, "entity_id": payload.entity_id},
        )
        return self.to_read(entity_type, row)

    async def update(
        self, entity_type: TranslatableEntity, translation_id: int, payload: TranslationUpdate
    ) -> Optional[TranslationRead]:
        repository = self._repository(entity_type)
        self._check_fields(repository.table, payload.translated)
        row = await repository.get_by_id(translation_id)
        if row is None:
            return None
        row = await repository.apply_changes(row, payload.translated)
        return self.to_read(entity_type, row)

    async def delete(self, entity_type: TranslatableEntity, translation_id: int) -> bool:
        deleted = await self._repository(entity_type).delete(translation_id)
        if deleted:
            logger.info(f"Deleted {entity_type.value} translation {translation_id}")
        return deleted

    async def localize(
        self, entity_type: TranslatableEntity, record: ReadModel, language: Optional[Language]
    ) -> ReadModel:
        """Overlay translated text on ``record``; missing or empty values keep the base text."""
        if language is None:
            return record
        localized = await self.localize_many(entity_type, [record], language)
        return localized[0]

    async def localize_many(
        self, entity_type: TranslatableEntity, records: Sequence[ReadModel], language: Optional[Language]
    ) -> List[ReadModel]:
        if language is None or not records:
            return list(records)
        repository = self._repository(entity_type)
        rows = await repository.for_entities([record.id for record in records], language)
        localized = []
        for record in records:
            row = rows.get(record.id)
            if row is None:
                localized.append(record)
                continue
            changes = {
                name: getattr(row, name)
                for name in repository.table.fields
                if getattr(row, name) and name in type(record).model_fields
            }
            localized.append(record.model_copy(update=changes))
        return localized

    async def stats(self) -> TranslationStats:
        """Translation coverage per language, overall and per entity type."""
        total_entities = 0
        translated: Dict[str, int] = {language.value: 0 for language in Language}
        by_entity_type: Dict[str, EntityTypeCoverage] = {}

        for entity_type in TranslatableEntity:
            repository = self._repository(entity_type)
            parents = await repository.count_parents()
            per_language = {language.value: await repository.count_translated(language) for language in Language}
            by_entity_type[entity_type.value] = EntityTypeCoverage(
                total_entities=parents, translated_entities=per_language
            )
            total_entities += parents
            for language, count in per_language.items():
                translated[language] += count

        coverage = {
            language: round(count * 100 / total_entities) if total_entities else 0
            for language, count in translated.items()
        }
        return TranslationStats(
            total_entities=total_entities,
            translated_entities=translated,
            coverage_percentage=coverage,
            by_entity_type=by_entity_type,
        )
