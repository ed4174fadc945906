# -*- coding: utf-8 -*-
"""
backend/tests/shared/integrations/test_email_sender.py

Factory de email sender según EMAIL_MODE.

Autor: YourPixels
Fecha: 2026-10-17
"""

from types import SimpleNamespace

import pytest

from app.shared.integrations import EmailSender, NullEmailSender, StubEmailSender


@pytest.mark.parametrize("mode,expected", [("disabled", NullEmailSender), (" Console ", StubEmailSender), (None, StubEmailSender)])
def test_factory_by_mode(mode, expected):
    assert isinstance(EmailSender.from_settings(SimpleNamespace(email_mode=mode)), expected)


@pytest.mark.asyncio
async def test_stub_sender_records_messages():
    sender = StubEmailSender()

    await sender.send("purchase_confirmation", "buyer@example.com", {"purchaseId": "p-1"})

    assert sender.sent == [("purchase_confirmation", "buyer@example.com", {"purchaseId": "p-1"})]
# Fin del archivo backend/tests/shared/integrations/test_email_sender.py
