#!/usr/bin/env python3
"""
CLI para o Simulador de Rastreamento de Contatos.

Ferramenta de linha de comando para executar o motor epidemiológico sem
interface gráfica, gerar relatórios JSON e visualizar a dinâmica S/I/Q.

Uso Exemplo:
    python run.py --profile finite --initial-cells 80 --seed 7 --plot
"""

import argparse
import json
import sys
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from tracesim.clock import ManualTimeSource
from tracesim.config import (
    PopulationConfig,
    SimulationConfig,
    TestingPolicy,
    get_default_finite_config,
    get_default_infinite_config,
)
from tracesim.controller import SimulationController
from tracesim.model import EpidemicModel

logger = logging.getLogger("tracesim-cli")


def parse_arguments(argv=None):
    """Configura e processa os argumentos da linha de comando."""
    parser = argparse.ArgumentParser(
        description="Simulador de transmissão por proximidade com rastreamento de contatos",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Cenário
    parser.add_argument('--profile', type=str, default='finite', choices=['finite', 'infinite'],
                        help="Perfil de quarentena (finita remove agentes, infinita os mantém).")
    parser.add_argument('--testing', type=str, choices=['per_agent', 'global'],
                        help="Sobrescreve a política de testagem do perfil.")
    parser.add_argument('--config', type=str, help="Arquivo JSON de configuração (ignora --profile).")

    # Parâmetros de Simulação
    parser.add_argument('--initial-cells', type=int, help="Tamanho da coorte inicial.")
    parser.add_argument('--initial-infections', type=int, help="Infectados iniciais.")
    parser.add_argument('--max-population', type=int, help="Limite de população.")
    parser.add_argument('--max-ticks', type=int, default=5000, help="Número máximo de ticks.")
    parser.add_argument('--frame-ms', type=float, default=16.0, help="Duração de um tick em ms.")
    parser.add_argument('--seed', type=int, help="Semente aleatória.")
    parser.add_argument('--keep-running', action='store_true',
                        help="Não parar quando a pandemia terminar.")

    # Saídas
    parser.add_argument('--output', type=str, help="Caminho para salvar relatório JSON.")
    parser.add_argument('--plot', action='store_true', help="Gerar gráfico PNG da dinâmica S/I/Q.")
    parser.add_argument('--verbose', action='store_true', help="Logs em nível DEBUG.")

    return parser.parse_args(argv)


def build_config(args) -> SimulationConfig:
    """Fábrica de configuração baseada nos argumentos."""
    if args.config:
        config = SimulationConfig.load_from_json(args.config)
    elif args.profile == 'finite':
        config = get_default_finite_config()
    elif args.profile == 'infinite':
        config = get_default_infinite_config()
    else:
        raise ValueError(f"Perfil desconhecido: {args.profile}")

    if args.testing == 'per_agent':
        config.testing.policy = TestingPolicy.PER_AGENT_PROBABILISTIC
    elif args.testing == 'global':
        config.testing.policy = TestingPolicy.GLOBAL_RANDOM_SINGLE

    # Revalida a população com as sobrescritas
    population = config.population
    config.population = PopulationConfig(
        initial_cells=args.initial_cells if args.initial_cells is not None else population.initial_cells,
        initial_infections=(args.initial_infections if args.initial_infections is not None
                            else population.initial_infections),
        max_population=args.max_population if args.max_population is not None else population.max_population,
        respawn_rate_ms=population.respawn_rate_ms,
        respawn_infection_rate=population.respawn_infection_rate,
    )
    return config


def run_simulation_loop(args, config: SimulationConfig) -> EpidemicModel:
    """Executa o laço headless com feedback periódico."""
    clock = ManualTimeSource()
    controller = SimulationController(config, time_source=clock, seed=args.seed)

    report_every = max(1, int(1000 / args.frame_ms))

    def report_progress(snapshot):
        if snapshot.tick % report_every == 0:
            counts = controller.model.get_state_counts()
            logger.info(
                f"t={snapshot.time_ms / 1000:.0f}s: S={counts['SUSCEPTIBLE']} "
                f"I={counts['INFECTIOUS']} Q={counts['QUARANTINED']}"
            )

    controller.on_snapshot(report_progress)
    controller.on_pandemic_end(lambda model: logger.info(f"Pandemia encerrada no tick {model.tick_count}"))

    logger.info(f"Iniciando simulação: {config.name}")
    model = controller.run(args.max_ticks, frame_ms=args.frame_ms, stop_on_end=not args.keep_running)
    controller.stop()

    logger.info("Simulação concluída.")
    return model


def analyze_results(model: EpidemicModel) -> Dict[str, Any]:
    """Calcula métricas finais da simulação."""
    history = model.get_metrics_dataframe()
    if history.empty:
        return {"ticks": 0, "history_df": history}

    final_stats = history.iloc[-1]
    return {
        "ticks": int(final_stats['tick']),
        "simulated_seconds": float(final_stats['time_ms']) / 1000.0,
        "peak_active_spreaders": int(history['active_spreaders'].max()),
        "peak_population": int(history['population'].max()),
        "total_infections": int(final_stats['total_infections']),
        "total_quarantines": int(final_stats['total_quarantines']),
        "total_removed": int(final_stats['total_removed']),
        "total_respawned": int(final_stats['total_respawned']),
        "pandemic_ended": bool(model.pandemic_ended),
        "pandemic_ended_tick": model.pandemic_ended_tick,
        "index_case_id": model.index_case_id,
        "history_df": history,
    }


def save_json_results(args, config: SimulationConfig, results: Dict[str, Any], history_df: pd.DataFrame):
    """Salva os resultados em formato JSON estruturado."""
    output_data = {
        "profile": config.name,
        "timestamp": datetime.now().isoformat(),
        "parameters": config.to_dict(),
        "seed": args.seed,
        "results": {k: v for k, v in results.items() if k != "history_df"},
        "time_series": history_df[['time_ms', 'S', 'I', 'Q', 'population']].to_dict(orient='records')
        if not history_df.empty else [],
    }

    try:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=4)
        logger.info(f"Relatório salvo em: {args.output}")
    except IOError as e:
        logger.error(f"Erro ao salvar JSON: {e}")


def generate_plot(args, history_df: pd.DataFrame) -> Optional[str]:
    """Gera gráfico S/I/Q usando Matplotlib."""
    if history_df.empty:
        logger.warning("Histórico vazio; gráfico não gerado.")
        return None

    seconds = history_df['time_ms'] / 1000.0

    plt.figure(figsize=(10, 6))
    plt.plot(seconds, history_df['S'], label='Suscetíveis', color='#9fcfff', linestyle='--')
    plt.plot(seconds, history_df['I'], label='Infectados', color='#8b0000', linewidth=2)
    plt.plot(seconds, history_df['Q'], label='Em quarentena', color='#40464b')

    plt.title(f"Dinâmica S/I/Q - Perfil: {args.profile.upper()}")
    plt.xlabel("Tempo (s)")
    plt.ylabel("Número de Agentes")
    plt.legend()
    plt.grid(True, alpha=0.3)

    filename = f"siq_{args.profile}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
    plt.savefig(filename)
    logger.info(f"Gráfico salvo em: {filename}")
    plt.close()  # Libera memória
    return filename


def main(argv=None):
    try:
        # 1. Parse Argumentos
        args = parse_arguments(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        # 2. Configurar Cenário
        config = build_config(args)

        # 3. Executar Simulação
        model = run_simulation_loop(args, config)

        # 4. Analisar Resultados
        results = analyze_results(model)

        # 5. Exibir no Terminal
        print("\n" + "=" * 40)
        print(f" RESULTADOS: {config.name.upper()}")
        print("=" * 40)
        print(f" Ticks              : {results['ticks']}")
        if results['ticks']:
            print(f" Tempo Simulado     : {results['simulated_seconds']:.1f} s")
            print(f" Pico Transmissores : {results['peak_active_spreaders']}")
            print(f" Infecções Totais   : {results['total_infections']}")
            print(f" Quarentenas Totais : {results['total_quarantines']}")
            print("-" * 40)
            ended = results['pandemic_ended_tick'] if results['pandemic_ended'] else "não"
            print(f" Fim da Pandemia    : {ended}")
        print("=" * 40 + "\n")

        # 6. Exportações
        if args.output:
            save_json_results(args, config, results, results['history_df'])

        if args.plot:
            generate_plot(args, results['history_df'])

    except KeyboardInterrupt:
        print("\nSimulação interrompida pelo usuário.")
        sys.exit(0)
    except Exception:
        logger.exception("Erro inesperado durante a execução.")
        sys.exit(1)


if __name__ == "__main__":
    main()
