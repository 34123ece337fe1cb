"""Ядро crypter: метаданные, протоколы, контексты, исключения и реестр."""
