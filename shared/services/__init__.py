"""Shared services package."""

from .contract_record_service import ContractRecordService
from .contract_status_service import ContractStatusService
from .contract_pdf_service import ContractPdfService
from .contract_email_service import ContractEmailService

__all__ = [
    'ContractRecordService',
    'ContractStatusService',
    'ContractPdfService',
    'ContractEmailService'
]
