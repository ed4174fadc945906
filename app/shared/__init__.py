# app/shared/__init__.py
"""
Infraestructura compartida: configuración, base de datos, stores,
middleware, scheduler e integraciones.

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""
# fin del archivo
