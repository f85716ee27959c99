"""Barraca de Praia entre Família: pedidos por mesa, estoque e fechamento de conta."""
