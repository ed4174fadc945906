# -*- coding: utf-8 -*-
"""
backend/tests/shared/utils/test_jwt_utils.py

Emisión y validación de JWT de perfil.

Autor: YourPixels
Fecha: 2026-10-17
"""

from datetime import timedelta

from jose import jwt

from app.shared.utils.jwt_utils import create_access_token, decode_token


def test_round_trip_keeps_claims():
    token = create_access_token({"sub": "profile-1"})

    payload = decode_token(token)

    assert payload["sub"] == "profile-1"
    assert payload["exp"] > payload["iat"]
    assert payload["jti"]


def test_expired_token_is_none():
    token = create_access_token({"sub": "profile-1"}, expires_delta=timedelta(seconds=-5))

    assert decode_token(token) is None


def test_foreign_signature_is_none():
    token = jwt.encode({"sub": "profile-1"}, "some-other-secret", algorithm="HS256")

    assert decode_token(token) is None
    assert decode_token("not-a-jwt") is None
# Fin del archivo backend/tests/shared/utils/test_jwt_utils.py
