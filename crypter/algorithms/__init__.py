"""Привязки к библиотекам и сгенерированные адаптеры шифров."""
