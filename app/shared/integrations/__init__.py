# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/__init__.py

Integraciones con colaboradores externos.
"""

from .email_sender import EmailSender, IEmailSender, NullEmailSender, StubEmailSender

__all__ = ["EmailSender", "IEmailSender", "NullEmailSender", "StubEmailSender"]
