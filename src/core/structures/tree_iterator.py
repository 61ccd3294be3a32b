from typing import TYPE_CHECKING, List

from src.core.structures.errors import TreeModifiedError

if TYPE_CHECKING:
    from src.core.structures.edit_node import EditNode
    from src.core.structures.edit_tree import EditTree


class EditTreeIterator:
    """
    Percurso in-order preguiçoso com pilha explícita.
    Guarda a versão da árvore no início; se a árvore sofrer qualquer
    mutação estrutural, o próximo __next__ lança TreeModifiedError.
    """
    def __init__(self, tree: "EditTree", start: int = 0):
        self._tree = tree
        self._expected_version = tree.version
        self._stack: List["EditNode"] = []

        # Desce até a posição inicial empilhando os nós que ainda faltam visitar
        node = tree.root
        pos = start
        while node is not None:
            rank = node.rank
            if pos <= rank:
                self._stack.append(node)
                node = node.left
            else:
                pos -= rank + 1
                node = node.right

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if self._tree.version != self._expected_version:
            raise TreeModifiedError("EditTree modificada durante a iteração")
        if not self._stack:
            raise StopIteration
        node = self._stack.pop()
        child = node.right
        while child is not None:
            self._stack.append(child)
            child = child.left
        return node.element
