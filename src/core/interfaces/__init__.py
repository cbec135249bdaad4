"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el pipeline depende del ledger y del cursor
  como abstracciones, y los tests los sustituyen por fakes.
"""
