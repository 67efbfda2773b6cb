"""Отслеживание актуальности сгенерированного PDF договора."""

from typing import Optional
from datetime import datetime

from domain.entities.base import utc_now
from domain.entities.contract import Contract
from core.logging.logger import logger


class ContractGenerationTracker:
    """Флаг modified_after_generation между содержимым и последним PDF."""

    def mark_content_changed(self, contract: Contract) -> bool:
        """
        Отметить изменение содержимого.

        Returns:
            True, если договор стал устаревшим относительно PDF
        """
        if not contract.generated_pdf_path:
            return False
        if not contract.modified_after_generation:
            logger.info("Contract modified after PDF generation", contract_id=contract.id)
        contract.modified_after_generation = True
        return True

    def mark_generated(self, contract: Contract, path: str, generated_at: Optional[datetime] = None) -> None:
        contract.generated_pdf_path = path
        contract.generated_pdf_at = generated_at or utc_now()
        contract.modified_after_generation = False

    def needs_generation(self, contract: Optional[Contract]) -> bool:
        """PDF нет или он не соответствует текущему содержимому."""
        if contract is None or not contract.generated_pdf_path:
            return True
        return bool(contract.modified_after_generation)
