"""Отправщики писем."""

from .email_sender import EmailDeliveryClient

__all__ = ["EmailDeliveryClient"]
