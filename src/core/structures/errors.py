class TreeInvariantError(RuntimeError):
    """
    Violação de invariante interna da árvore (tamanho, código de balanceamento
    ou altura inconsistentes). Nunca deve ocorrer com uso correto: indica um
    defeito na implementação, não um erro do chamador.
    """


class TreeModifiedError(RuntimeError):
    """A árvore sofreu uma mutação estrutural durante uma iteração em andamento."""
