"""Painel IPTV - cache de catálogo e controle de listas ativas."""
