from dataclasses import dataclass
from typing import List, Optional, Tuple

from src.core.structures.errors import TreeInvariantError

NOT_FOUND = -1


class BalanceCode:
    """
    Código de balanceamento de um nó: altura(direita) - altura(esquerda).
    A invariante AVL restringe o valor a {-1, 0, +1}.
    """
    LEFT = -1
    SAME = 0
    RIGHT = 1

    # Símbolos usados no dump de depuração
    SYMBOLS = {LEFT: "/", SAME: "=", RIGHT: "\\"}


@dataclass
class Outcome:
    """
    Resultado de uma operação recursiva sobre uma subárvore.
    - root: nova raiz da subárvore (None = subárvore vazia)
    - changed: True se a altura mudou e o pai ainda precisa absorver a mudança
    - rotations: rotações simples realizadas (uma dupla conta como duas)
    - element: caractere removido (delete) ou extraído para servir de cola
    """
    root: Optional["EditNode"]
    changed: bool = False
    rotations: int = 0
    element: Optional[str] = None


@dataclass
class SplitResult:
    """As duas metades de um split, cada uma com sua altura exata."""
    left: Optional["EditNode"]
    left_height: int
    right: Optional["EditNode"]
    right_height: int
    rotations: int = 0


def size_of(node: Optional["EditNode"]) -> int:
    return node.size if node is not None else 0


def height_of(node: Optional["EditNode"]) -> int:
    """Altura em O(log n): desce sempre pelo lado mais alto indicado pelo código."""
    height = -1
    while node is not None:
        height += 1
        node = node.right if node.balance == BalanceCode.RIGHT else node.left
    return height


def balanced_height(count: int) -> int:
    """Altura de uma subárvore de `count` nós construída pelo ponto médio."""
    return count.bit_length() - 1


class EditNode:
    """
    Nó da árvore AVL com rank.
    Armazena um caractere, as subárvores (None = vazia), o tamanho da
    subárvore e o código de balanceamento. O rank (posição in-order do nó
    dentro da própria subárvore) é derivado do tamanho da subárvore esquerda.
    """
    def __init__(self, element: str, left: Optional["EditNode"] = None,
                 right: Optional["EditNode"] = None, balance: int = BalanceCode.SAME):
        self.element = element
        self.left = left
        self.right = right
        self.balance = balance
        self.size = size_of(left) + size_of(right) + 1

    @property
    def rank(self) -> int:
        return size_of(self.left)

    def height(self) -> int:
        return height_of(self)

    def _resize(self):
        self.size = size_of(self.left) + size_of(self.right) + 1

    def copy(self) -> "EditNode":
        """Cópia profunda: mesmos elementos e mesma forma, todos os nós novos."""
        left = self.left.copy() if self.left is not None else None
        right = self.right.copy() if self.right is not None else None
        return EditNode(self.element, left, right, self.balance)

    # --- Leitura ---

    def get(self, pos: int) -> str:
        """Caractere na posição `pos` desta subárvore em O(log n)."""
        node = self
        while node is not None:
            rank = node.rank
            if pos == rank:
                return node.element
            if pos < rank:
                node = node.left
            else:
                pos -= rank + 1
                node = node.right
        raise IndexError(f"Posição fora da subárvore: {pos}")

    def get_range(self, start: int, end: int, sink: List[str]):
        """
        Acrescenta a `sink`, em ordem, os caracteres das posições [start, end).
        Subárvores inteiramente fora do intervalo não são visitadas.
        """
        rank = self.rank
        if start < rank and self.left is not None:
            self.left.get_range(start, min(end, rank), sink)
        if start <= rank < end:
            sink.append(self.element)
        if end > rank + 1 and self.right is not None:
            self.right.get_range(max(start - rank - 1, 0), end - rank - 1, sink)

    def collect(self, sink: List[str]):
        if self.left is not None:
            self.left.collect(sink)
        sink.append(self.element)
        if self.right is not None:
            self.right.collect(sink)

    def debug_entries(self, sink: List[str]):
        """Pré-ordem: elemento, rank e símbolo do código de cada nó."""
        sink.append(f"{self.element}{self.rank}{BalanceCode.SYMBOLS[self.balance]}")
        if self.left is not None:
            self.left.debug_entries(sink)
        if self.right is not None:
            self.right.debug_entries(sink)

    # --- Busca ---

    def find(self, pattern: str, pos: int, cursors: List[int]) -> int:
        """
        Procura, em uma única passada in-order, a primeira ocorrência de
        `pattern` que começa em `pos` ou depois.

        `cursors` guarda os casamentos parciais vivos (quantos caracteres do
        padrão já casaram terminando no nó anterior). Todos avançam a cada
        caractere visitado, então padrões repetidos ("aa" em "aaa") não
        pulam ocorrências sobrepostas.

        Retorna a posição do ÚLTIMO caractere casado ou NOT_FOUND.
        """
        rank = self.rank
        if pos < rank and self.left is not None:
            end = self.left.find(pattern, pos, cursors)
            if end != NOT_FOUND:
                return end
        if pos <= rank:
            if self._match_step(pattern, cursors):
                return rank
            right_pos = 0
        else:
            right_pos = pos - rank - 1
        if self.right is None:
            return NOT_FOUND
        end = self.right.find(pattern, right_pos, cursors)
        if end == NOT_FOUND:
            return NOT_FOUND
        return rank + 1 + end

    def _match_step(self, pattern: str, cursors: List[int]) -> bool:
        survivors = []
        for matched in cursors:
            if pattern[matched] == self.element:
                if matched + 1 == len(pattern):
                    return True
                survivors.append(matched + 1)
        if pattern[0] == self.element:
            if len(pattern) == 1:
                return True
            survivors.append(1)
        cursors[:] = survivors
        return False

    # --- Rotações ---

    def _rotate_left(self) -> "EditNode":
        """
        Rotação simples à esquerda. O filho direito sobe e o neto interno
        passa para este nó. Só os tamanhos dos dois nós rotacionados mudam;
        os códigos ficam a cargo de quem chama.
        """
        pivot = self.right
        self.right = pivot.left
        pivot.left = self
        self._resize()
        pivot._resize()
        return pivot

    def _rotate_right(self) -> "EditNode":
        """Rotação simples à direita (espelho de _rotate_left)."""
        pivot = self.left
        self.left = pivot.right
        pivot.right = self
        self._resize()
        pivot._resize()
        return pivot

    def _double_rotate_left(self) -> "EditNode":
        """
        Rotação dupla direita-esquerda. Os códigos finais dependem do código
        do neto interno (self.right.left) antes da rotação.
        """
        child = self.right
        inner = child.left
        if inner.balance == BalanceCode.RIGHT:
            self.balance = BalanceCode.LEFT
            child.balance = BalanceCode.SAME
        elif inner.balance == BalanceCode.LEFT:
            self.balance = BalanceCode.SAME
            child.balance = BalanceCode.RIGHT
        else:
            self.balance = BalanceCode.SAME
            child.balance = BalanceCode.SAME
        inner.balance = BalanceCode.SAME
        self.right = child._rotate_right()
        return self._rotate_left()

    def _double_rotate_right(self) -> "EditNode":
        """Rotação dupla esquerda-direita; o neto interno é self.left.right."""
        child = self.left
        inner = child.right
        if inner.balance == BalanceCode.RIGHT:
            self.balance = BalanceCode.SAME
            child.balance = BalanceCode.LEFT
        elif inner.balance == BalanceCode.LEFT:
            self.balance = BalanceCode.RIGHT
            child.balance = BalanceCode.SAME
        else:
            self.balance = BalanceCode.SAME
            child.balance = BalanceCode.SAME
        inner.balance = BalanceCode.SAME
        self.left = child._rotate_left()
        return self._rotate_right()

    # --- Rebalanceamento na volta da recursão ---

    def _absorb_growth(self, side: int, rotations: int) -> Outcome:
        """
        A subárvore do lado `side` ficou um nível mais alta.
        Retorna changed=True se a altura desta subárvore também cresceu.
        """
        if self.balance == BalanceCode.SAME:
            self.balance = side
            return Outcome(self, True, rotations)
        if self.balance != side:
            self.balance = BalanceCode.SAME
            return Outcome(self, False, rotations)

        # Pesado duas vezes no mesmo lado: uma rotação sempre absorve o crescimento
        if side == BalanceCode.LEFT:
            if self.left.balance == BalanceCode.LEFT:
                self.balance = BalanceCode.SAME
                self.left.balance = BalanceCode.SAME
                return Outcome(self._rotate_right(), False, rotations + 1)
            return Outcome(self._double_rotate_right(), False, rotations + 2)

        if self.right.balance == BalanceCode.RIGHT:
            self.balance = BalanceCode.SAME
            self.right.balance = BalanceCode.SAME
            return Outcome(self._rotate_left(), False, rotations + 1)
        return Outcome(self._double_rotate_left(), False, rotations + 2)

    def _absorb_shrink(self, side: int, rotations: int) -> Outcome:
        """
        A subárvore do lado `side` ficou um nível mais baixa.
        Retorna changed=True se a altura desta subárvore também diminuiu.
        """
        if self.balance == BalanceCode.SAME:
            self.balance = -side
            return Outcome(self, False, rotations)
        if self.balance == side:
            self.balance = BalanceCode.SAME
            return Outcome(self, True, rotations)

        if side == BalanceCode.LEFT:
            child = self.right
            if child.balance == BalanceCode.RIGHT:
                self.balance = BalanceCode.SAME
                child.balance = BalanceCode.SAME
                return Outcome(self._rotate_left(), True, rotations + 1)
            if child.balance == BalanceCode.SAME:
                # A altura total se mantém; este nó continua pesado à direita
                child.balance = BalanceCode.LEFT
                return Outcome(self._rotate_left(), False, rotations + 1)
            return Outcome(self._double_rotate_left(), True, rotations + 2)

        child = self.left
        if child.balance == BalanceCode.LEFT:
            self.balance = BalanceCode.SAME
            child.balance = BalanceCode.SAME
            return Outcome(self._rotate_right(), True, rotations + 1)
        if child.balance == BalanceCode.SAME:
            child.balance = BalanceCode.RIGHT
            return Outcome(self._rotate_right(), False, rotations + 1)
        return Outcome(self._double_rotate_right(), True, rotations + 2)

    # --- Inserção ---

    def add(self, element: str, pos: int) -> Outcome:
        """
        Insere `element` na posição `pos` (já validada pela árvore).
        Empate com o rank vai para a esquerda.
        """
        rank = self.rank
        self.size += 1
        if pos <= rank:
            side = BalanceCode.LEFT
            outcome = insert_into(self.left, element, pos)
            self.left = outcome.root
        else:
            side = BalanceCode.RIGHT
            outcome = insert_into(self.right, element, pos - rank - 1)
            self.right = outcome.root

        if not outcome.changed:
            return Outcome(self, False, outcome.rotations)
        return self._absorb_growth(side, outcome.rotations)

    # --- Remoção ---

    def delete(self, pos: int) -> Outcome:
        """
        Remove o nó na posição `pos`. Um nó com dois filhos recebe o
        elemento do sucessor in-order, e a remoção passa a ser a do menor nó
        da subárvore direita.
        """
        rank = self.rank
        if pos == rank:
            if self.left is None or self.right is None:
                child = self.left if self.left is not None else self.right
                return Outcome(child, True, 0, self.element)
            removed = self.element
            outcome = self.right.delete_smallest()
            self.element = outcome.element
            self.right = outcome.root
            side = BalanceCode.RIGHT
        elif pos < rank:
            outcome = self.left.delete(pos)
            self.left = outcome.root
            removed = outcome.element
            side = BalanceCode.LEFT
        else:
            outcome = self.right.delete(pos - rank - 1)
            self.right = outcome.root
            removed = outcome.element
            side = BalanceCode.RIGHT

        self.size -= 1
        if outcome.changed:
            result = self._absorb_shrink(side, outcome.rotations)
        else:
            result = Outcome(self, False, outcome.rotations)
        result.element = removed
        return result

    def delete_smallest(self) -> Outcome:
        """Remove o nó mais à esquerda; o caractere vai em Outcome.element."""
        if self.left is None:
            return Outcome(self.right, True, 0, self.element)
        outcome = self.left.delete_smallest()
        self.left = outcome.root
        self.size -= 1
        if outcome.changed:
            result = self._absorb_shrink(BalanceCode.LEFT, outcome.rotations)
        else:
            result = Outcome(self, False, outcome.rotations)
        result.element = outcome.element
        return result

    def delete_largest(self) -> Outcome:
        """Remove o nó mais à direita; o caractere vai em Outcome.element."""
        if self.right is None:
            return Outcome(self.left, True, 0, self.element)
        outcome = self.right.delete_largest()
        self.right = outcome.root
        self.size -= 1
        if outcome.changed:
            result = self._absorb_shrink(BalanceCode.RIGHT, outcome.rotations)
        else:
            result = Outcome(self, False, outcome.rotations)
        result.element = outcome.element
        return result

    # --- Split ---

    def split(self, pos: int, height: int) -> SplitResult:
        """
        Divide esta subárvore (de altura `height`) em posições < pos e >= pos.

        Na volta de cada nível, o irmão intocado e o elemento deste nó são
        colados à metade acumulada com join(). As alturas das partes são
        rastreadas exatamente, então cada junção escolhe o caso de
        concatenação sem recalcular alturas.
        """
        rank = self.rank
        left_height = height - (2 if self.balance == BalanceCode.RIGHT else 1)
        right_height = height - (2 if self.balance == BalanceCode.LEFT else 1)

        if pos == rank:
            outcome, joined = join(None, -1, self.element, self.right, right_height)
            return SplitResult(self.left, left_height, outcome.root, joined, outcome.rotations)
        if pos == rank + 1:
            outcome, joined = join(self.left, left_height, self.element, None, -1)
            return SplitResult(outcome.root, joined, self.right, right_height, outcome.rotations)

        if pos < rank:
            part = self.left.split(pos, left_height)
            outcome, joined = join(part.right, part.right_height, self.element,
                                   self.right, right_height)
            return SplitResult(part.left, part.left_height, outcome.root, joined,
                               part.rotations + outcome.rotations)

        part = self.right.split(pos - rank - 1, right_height)
        outcome, joined = join(self.left, left_height, self.element,
                               part.left, part.left_height)
        return SplitResult(outcome.root, joined, part.right, part.right_height,
                           part.rotations + outcome.rotations)

    # --- Verificação ---

    def verify(self) -> Tuple[int, int]:
        """
        Recalcula (tamanho, altura) do zero e confere com os campos
        guardados. O(n): uso em testes e depuração.
        """
        left_size, left_height = self.left.verify() if self.left is not None else (0, -1)
        right_size, right_height = self.right.verify() if self.right is not None else (0, -1)
        size = left_size + right_size + 1
        if size != self.size:
            raise TreeInvariantError(
                f"Tamanho incorreto em '{self.element}': guardado {self.size}, real {size}")
        diff = right_height - left_height
        if diff != self.balance:
            raise TreeInvariantError(
                f"Código incorreto em '{self.element}': guardado {self.balance}, "
                f"alturas esquerda={left_height} direita={right_height}")
        return size, max(left_height, right_height) + 1

    def slow_height(self) -> int:
        left = self.left.slow_height() if self.left is not None else -1
        right = self.right.slow_height() if self.right is not None else -1
        return max(left, right) + 1

    def slow_size(self) -> int:
        left = self.left.slow_size() if self.left is not None else 0
        right = self.right.slow_size() if self.right is not None else 0
        return left + right + 1

    def __repr__(self):
        return f"EditNode({self.element!r}, rank={self.rank}, size={self.size}, balance={self.balance})"


# --- Operações sobre subárvores possivelmente vazias ---

def insert_into(node: Optional[EditNode], element: str, pos: int) -> Outcome:
    if node is None:
        if pos != 0:
            raise IndexError(f"Posição fora da subárvore: {pos}")
        return Outcome(EditNode(element), changed=True)
    return node.add(element, pos)


def concat_right(node: Optional[EditNode], glue: str, other: Optional[EditNode],
                 height_diff: int) -> Outcome:
    """
    Junta `other`, `height_diff` níveis mais baixa que `node`, à direita de
    `node`, com `glue` como nó de ligação. Desce pela espinha direita até a
    diferença cair para 0 ou 1 e rebalanceia na volta como em add().
    changed=True significa que o resultado ficou um nível mais alto que `node`.
    """
    if height_diff < 0:
        raise TreeInvariantError(f"concat_right com diferença de altura negativa: {height_diff}")
    if height_diff <= 1:
        balance = BalanceCode.LEFT if height_diff == 1 else BalanceCode.SAME
        return Outcome(EditNode(glue, node, other, balance), changed=True)

    step = 2 if node.balance == BalanceCode.LEFT else 1
    outcome = concat_right(node.right, glue, other, height_diff - step)
    node.right = outcome.root
    node._resize()
    if not outcome.changed:
        return Outcome(node, False, outcome.rotations)
    return node._absorb_growth(BalanceCode.RIGHT, outcome.rotations)


def concat_left(node: Optional[EditNode], glue: str, other: Optional[EditNode],
                height_diff: int) -> Outcome:
    """Espelho de concat_right: `other` entra à esquerda de `node`."""
    if height_diff < 0:
        raise TreeInvariantError(f"concat_left com diferença de altura negativa: {height_diff}")
    if height_diff <= 1:
        balance = BalanceCode.RIGHT if height_diff == 1 else BalanceCode.SAME
        return Outcome(EditNode(glue, other, node, balance), changed=True)

    step = 2 if node.balance == BalanceCode.RIGHT else 1
    outcome = concat_left(node.left, glue, other, height_diff - step)
    node.left = outcome.root
    node._resize()
    if not outcome.changed:
        return Outcome(node, False, outcome.rotations)
    return node._absorb_growth(BalanceCode.LEFT, outcome.rotations)


def join(left: Optional[EditNode], left_height: int, glue: str,
         right: Optional[EditNode], right_height: int) -> Tuple[Outcome, int]:
    """
    Concatena left + glue + right em O(|diferença de altura| + 1).
    Retorna o Outcome e a altura exata da árvore resultante.
    """
    if left_height >= right_height:
        outcome = concat_right(left, glue, right, left_height - right_height)
        height = left_height
    else:
        outcome = concat_left(right, glue, left, right_height - left_height)
        height = right_height
    if outcome.changed:
        height += 1
    return outcome, height


def build_balanced(text: str, start: int, end: int) -> Optional[EditNode]:
    """
    Constrói em O(n) a subárvore de text[start:end] pelo ponto médio.
    As alturas das metades saem de balanced_height(), sem rotações.
    """
    if start == end:
        return None
    mid = (start + end) // 2
    left_height = balanced_height(mid - start)
    right_height = balanced_height(end - mid - 1)
    if left_height == right_height:
        balance = BalanceCode.SAME
    elif left_height < right_height:
        balance = BalanceCode.RIGHT
    else:
        balance = BalanceCode.LEFT
    return EditNode(text[mid], build_balanced(text, start, mid),
                    build_balanced(text, mid + 1, end), balance)
