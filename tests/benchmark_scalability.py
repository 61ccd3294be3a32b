import sys
import os
import time
import random
import matplotlib.pyplot as plt

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.core.structures.edit_tree import EditTree

def run_benchmark():
    print("--- INICIANDO BENCHMARK DE ESCALABILIDADE  ---")

    # Tamanhos de buffer para testar (Escala Logarítmica: 100 -> 100.000)
    sizes = [100, 500, 1000, 5000, 10000, 20000, 50000, 100000]

    insert_times = []
    access_times = []
    split_concat_times = []
    build_times = []

    for n in sizes:
        print(f"\nTestando com N = {n} caracteres...")
        text = "".join(random.choice("abcdefghij ") for _ in range(n))

        # --- TESTE 1: Construção O(n) a partir da string ---
        start_time = time.time()
        tree = EditTree(text)
        end_time = time.time()
        build_times.append((end_time - start_time) * 1000) # ms

        # --- TESTE 2: Inserção em posições aleatórias ---
        positions = [random.randint(0, n) for _ in range(1000)]
        start_time = time.time()
        for pos in positions:
            tree.insert_char("#", pos)
        end_time = time.time()
        insert_times.append((end_time - start_time) / len(positions) * 1000) # ms

        # --- TESTE 3: Acesso por posição ---
        targets = [random.randint(0, tree.length() - 1) for _ in range(1000)]
        start_time = time.time()
        for pos in targets:
            tree.char_at(pos)
        end_time = time.time()
        access_times.append((end_time - start_time) / len(targets) * 1000) # ms

        # --- TESTE 4: Split + Concatenate (recorta e cola o buffer) ---
        cuts = [random.randint(1, tree.length() - 1) for _ in range(200)]
        start_time = time.time()
        for pos in cuts:
            tail = tree.split(pos)
            tree.concatenate(tail)
        end_time = time.time()
        split_concat_times.append((end_time - start_time) / len(cuts) * 1000) # ms

        print(f"   > Construção:        {build_times[-1]:.2f} ms")
        print(f"   > Inserção (méd):    {insert_times[-1]:.4f} ms")
        print(f"   > Acesso (méd):      {access_times[-1]:.4f} ms")
        print(f"   > Split+Concat (méd): {split_concat_times[-1]:.4f} ms")
        print(f"   > Altura final: {tree.height()} | Rotações: {tree.total_rotation_count()}")

    # --- GERAR GRÁFICO (Prova Visual) ---
    plot_results(sizes, insert_times, access_times, split_concat_times, build_times)

def plot_results(sizes, inserts, accesses, splits, builds):
    plt.figure(figsize=(12, 5))

    # Gráfico 1: Operações por posição (O(log n))
    plt.subplot(1, 2, 1)
    plt.plot(sizes, inserts, marker='o', label='Inserção')
    plt.plot(sizes, accesses, marker='x', label='Acesso')
    plt.plot(sizes, splits, marker='^', label='Split + Concatenate')
    plt.xscale('log')
    plt.xlabel('Tamanho do Buffer (N)')
    plt.ylabel('Tempo Médio (ms)')
    plt.title('Performance EditTree: O(log n)')
    plt.legend()
    plt.grid(True)

    # Gráfico 2: Construção a partir de string (O(n))
    plt.subplot(1, 2, 2)
    plt.plot(sizes, builds, marker='s', color='orange', label='Construção')
    plt.xlabel('Tamanho do Buffer (N)')
    plt.ylabel('Tempo Total (ms)')
    plt.title('Construção a partir de string: O(n)')
    plt.legend()
    plt.grid(True)

    # Salva em imagem para colocar no relatório
    os.makedirs("data", exist_ok=True)
    plt.savefig("data/benchmark_results.png")
    print("\n>> Gráfico salvo em 'data/benchmark_results.png'")
    plt.show()

if __name__ == "__main__":
    run_benchmark()
