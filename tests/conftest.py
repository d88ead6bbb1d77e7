"""Shared fixtures: a small two-vehicle fleet snapshot."""

import pytest

SNAPSHOT_YAML = """
vehicles:
  - alias: civic
    marca: Honda
    modelo: 2018
    kilometrajeInicial: 42000
    kilometrajeTotal: 45850
  - alias: hilux
    marca: Toyota
    modelo: 2015
    kilometrajeInicial: 120000

routes:
  - vehicleAlias: civic
    distanciaRecorrida: 120
    fecha: '2025-01-10'
  - vehicleAlias: civic
    distanciaRecorrida: 80
    fecha: 2025-01-18
  - vehicleAlias: hilux
    distanciaRecorrida: 340
    fecha: '2025-01-12'

refuels:
  - vehicleAlias: civic
    tipoCombustible: Regular
    cantidadGastada: 350
    galones: 10
    fecha: '2025-01-09'
  - vehicleAlias: civic
    tipoCombustible: Super
    cantidadGastada: 190
    galones: 5
    fecha: '2025-01-20'
  - vehicleAlias: hilux
    tipoCombustible: Diesel
    cantidadGastada: 420
    galones: 13
    fecha: '2025-01-11'

expenses:
  - vehicleAlias: civic
    categoria: Seguro
    monto: 450
    fecha: '2025-01-01'
    esRecurrente: true
    frecuenciaRecurrencia: Mensual
    proximoPago: '2025-02-01'
  - vehicleAlias: civic
    categoria: Peajes
    monto: 30
    fecha: '2025-01-15'
  - vehicleAlias: hilux
    categoria: Impuestos
    monto: 900
    fecha: '2025-01-05'
    esRecurrente: true
    frecuenciaRecurrencia: annual
    proximoPago: '2026-01-05'

maintenance:
  - vehicleAlias: civic
    tipo: Cambio de aceite
    costo: 375
    fecha: '2024-12-20'
    kilometraje: 45000
    proximoServicioFecha: '2025-06-20'
    proximoServicioKm: 50000
  - vehicleAlias: hilux
    tipo: Frenos
    costo: 800
    fecha: '2024-11-02'
    proximoServicioKm: 120200
  - vehicleAlias: hilux
    tipo: Inspección
    costo: 150
    fecha: '2024-10-01'
"""


@pytest.fixture
def snapshot_yaml():
    return SNAPSHOT_YAML


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "demo.yaml"
    path.write_text(SNAPSHOT_YAML, encoding="utf-8")
    return path
