from typing import List, Optional, Union

from src.core.structures.edit_node import (
    NOT_FOUND, EditNode, Outcome, balanced_height, build_balanced, insert_into, join, size_of,
)
from src.core.structures.errors import TreeInvariantError
from src.core.structures.tree_iterator import EditTreeIterator


class EditTree:
    """
    Árvore AVL com rank que serve de buffer para um editor de texto.
    Acesso, inserção e remoção por posição em O(log n); split e
    concatenação também em O(log n), preservando o balanceamento.

    A árvore guarda a altura atualizada incrementalmente, um contador de
    versões (invalidação de iteradores) e o total de rotações já feitas.
    """
    # Acima deste tamanho check() só roda com force=True (é O(n))
    CHECK_LIMIT = 1000

    def __init__(self, source: Union[str, "EditTree", None] = None, debug: bool = False):
        self._root: Optional[EditNode] = None
        self._height = -1
        self._rotation_count = 0
        self._version = 0
        self.debug = debug

        if isinstance(source, EditTree):
            if source._root is not None:
                self._root = source._root.copy()
            self._height = source._height
        elif isinstance(source, str):
            self._root = build_balanced(source, 0, len(source))
            self._height = balanced_height(len(source))
        elif source is not None:
            raise TypeError(f"Origem inválida para EditTree: {type(source).__name__}")

        if self.debug:
            self.check()

    # --- Consultas ---

    @property
    def root(self) -> Optional[EditNode]:
        return self._root

    @property
    def version(self) -> int:
        return self._version

    def total_rotation_count(self) -> int:
        """Rotações desde a criação da árvore (uma dupla conta como duas)."""
        return self._rotation_count

    def length(self) -> int:
        return size_of(self._root)

    def height(self) -> int:
        return self._height

    def char_at(self, pos: int) -> str:
        self._check_position(pos, self.length() - 1)
        return self._root.get(pos)

    def substring(self, pos: int, length: int) -> str:
        """String de `length` caracteres a partir de `pos`."""
        self._check_range(pos, length)
        if length == 0:
            return ""
        sink: List[str] = []
        self._root.get_range(pos, pos + length, sink)
        return "".join(sink)

    def subsequence(self, start: int, end: int) -> "EditTree":
        """Nova árvore independente com as posições [start, end); esta não muda."""
        if start < 0 or end < start or end > self.length():
            raise IndexError(f"Intervalo inválido [{start}, {end}) para tamanho {self.length()}")
        return EditTree(self.substring(start, end - start), debug=self.debug)

    def find(self, pattern: str, from_pos: int = 0) -> int:
        """
        Posição da primeira ocorrência de `pattern` que não começa antes de
        `from_pos`; -1 se não houver.
        """
        self._check_position(from_pos, self.length())
        if pattern == "":
            return from_pos
        if self._root is None:
            return NOT_FOUND
        end = self._root.find(pattern, from_pos, [])
        if end == NOT_FOUND:
            return NOT_FOUND
        return end - len(pattern) + 1

    # --- Mutações ---

    def insert_char(self, c: str, pos: int):
        """Insere o caractere `c` na posição in-order `pos` (0 <= pos <= tamanho)."""
        self._check_char(c)
        self._check_position(pos, self.length())
        outcome = insert_into(self._root, c, pos)
        self._apply(outcome, 1)
        self._after_mutation(f"insert_char({c!r}, {pos})")

    def append(self, c: str):
        self.insert_char(c, self.length())

    def insert(self, pos: int, text: str):
        """Insere `text` inteiro na posição `pos` usando split + concatenate."""
        self._check_position(pos, self.length())
        if text == "":
            return
        tail = self.split(pos)
        self.concatenate(EditTree(text))
        self.concatenate(tail)

    def delete_at(self, pos: int) -> str:
        """Remove e retorna o caractere da posição `pos`."""
        self._check_position(pos, self.length() - 1)
        outcome = self._root.delete(pos)
        self._apply(outcome, -1)
        self._after_mutation(f"delete_at({pos})")
        return outcome.element

    def delete_range(self, start: int, length: int) -> "EditTree":
        """Remove `length` caracteres a partir de `start` e os retorna em uma nova árvore."""
        self._check_range(start, length)
        middle = self.split(start)
        tail = middle.split(length)
        self.concatenate(tail)
        return middle

    def concatenate(self, other: "EditTree"):
        """
        Acrescenta o conteúdo de `other` ao final desta árvore em O(log n).
        `other` fica vazia; seu contador de rotações é somado a este.
        """
        if other is self:
            raise ValueError("Uma árvore não pode ser concatenada consigo mesma.")
        if other._root is None:
            return

        if self._root is None:
            self._root = other._root
            self._height = other._height
            rotations = 0
        elif self._height >= other._height:
            # A cola sai da árvore mais baixa, que pode perder um nível
            glue = other._root.delete_smallest()
            other_height = other._height - (1 if glue.changed else 0)
            outcome, self._height = join(self._root, self._height, glue.element,
                                         glue.root, other_height)
            self._root = outcome.root
            rotations = glue.rotations + outcome.rotations
        else:
            glue = self._root.delete_largest()
            own_height = self._height - (1 if glue.changed else 0)
            outcome, self._height = join(glue.root, own_height, glue.element,
                                         other._root, other._height)
            self._root = outcome.root
            rotations = glue.rotations + outcome.rotations

        self._rotation_count += rotations + other._rotation_count
        other._root = None
        other._height = -1
        other._after_mutation("esvaziada por concatenate")
        self._after_mutation("concatenate")

    def split(self, pos: int) -> "EditTree":
        """
        Divide a árvore em `pos`: esta fica com as posições < pos e a nova
        árvore retornada fica com as posições >= pos.
        """
        self._check_position(pos, self.length())
        tail = EditTree(debug=self.debug)
        if pos == self.length():
            return tail
        if pos == 0:
            tail._root, tail._height = self._root, self._height
            self._root, self._height = None, -1
        else:
            parts = self._root.split(pos, self._height)
            self._root, self._height = parts.left, parts.left_height
            tail._root, tail._height = parts.right, parts.right_height
            self._rotation_count += parts.rotations
        tail._after_mutation("criada por split")
        self._after_mutation(f"split({pos})")
        return tail

    # --- Iteração ---

    def __iter__(self) -> EditTreeIterator:
        return EditTreeIterator(self)

    def iter_from(self, pos: int) -> EditTreeIterator:
        self._check_position(pos, self.length())
        return EditTreeIterator(self, pos)

    # --- Representação ---

    def __len__(self):
        return self.length()

    def __getitem__(self, pos: int) -> str:
        return self.char_at(pos)

    def __str__(self):
        if self._root is None:
            return ""
        sink: List[str] = []
        self._root.collect(sink)
        return "".join(sink)

    def __repr__(self):
        return f"EditTree(tamanho={self.length()}, altura={self._height}, rotacoes={self._rotation_count})"

    def to_debug_string(self) -> str:
        """
        Elementos, ranks e códigos em pré-ordem.
        Ex.: para b com filhos a e c -> "[b1=, a0=, c0=]".
        """
        if self._root is None:
            return "[]"
        sink: List[str] = []
        self._root.debug_entries(sink)
        return "[" + ", ".join(sink) + "]"

    # --- Verificação ---

    def check(self, force: bool = False):
        """
        Recalcula tamanho, altura e códigos de toda a árvore e compara com os
        valores guardados. Lança TreeInvariantError se algo divergir.
        """
        if self._root is None:
            if self._height != -1:
                raise TreeInvariantError(f"Árvore vazia com altura {self._height}")
            return
        if not force and self._root.size >= self.CHECK_LIMIT:
            return
        _, height = self._root.verify()
        if height != self._height:
            raise TreeInvariantError(f"Altura guardada {self._height}, real {height}")

    def slow_height(self) -> int:
        return self._root.slow_height() if self._root is not None else -1

    def slow_size(self) -> int:
        return self._root.slow_size() if self._root is not None else 0

    # --- Auxiliares ---

    def _apply(self, outcome: Outcome, height_delta: int):
        self._root = outcome.root
        if outcome.changed:
            self._height += height_delta
        self._rotation_count += outcome.rotations

    def _after_mutation(self, operation: str):
        self._version += 1
        if self.debug:
            self.check()
            print(f"[EditTree] {operation}: tamanho={self.length()}, altura={self._height}, "
                  f"rotacoes={self._rotation_count}")

    def _check_position(self, pos: int, upper: int):
        if pos < 0 or pos > upper:
            raise IndexError(f"Posição {pos} fora do intervalo [0, {upper}]")

    def _check_range(self, pos: int, length: int):
        if pos < 0 or length < 0 or pos + length > self.length():
            raise IndexError(f"Intervalo ({pos}, {length}) inválido para tamanho {self.length()}")

    def _check_char(self, c: str):
        if not isinstance(c, str) or len(c) != 1:
            raise ValueError(f"Elemento deve ser um único caractere: {c!r}")
