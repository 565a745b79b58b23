"""
OSPFGraph CLI — Command-line interface for path and impact analysis.

Commands:
  path      — Shortest path between two nodes
  kpaths    — Primary and alternate paths
  ecmp      — Equal-cost shortest paths
  blast     — Blast radius of a link cost change
  impact    — Link-down impact ranking for every link
  fail      — Simultaneous failure of several links
  analyze   — Country paths, network stats, critical links
  rank      — Bandwidth-aware path ranking
  capacity  — Link utilization and growth headroom
  asymmetry — Links with unequal forward/reverse cost
  serve     — Start the REST API
  demo      — Run a demo with sample data
"""

import json

import click

from .config import ENGINE_CONFIG, EngineConfig
from .errors import TopologyError
from .log import set_global_log_level
from .topology.loader import load_topology
from .topology.model import Link, Node, Topology


@click.group()
@click.version_option(version="0.1.0", prog_name="ospfgraph")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--log-level", default=None,
              type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
              help="Package log level")
@click.option("--config", "config_file", type=click.Path(exists=True), default=None,
              help="Engine config JSON")
@click.pass_context
def cli(ctx, verbose, log_level, config_file):
    """OSPFGraph — Path & Impact Analysis for routed topologies."""
    if verbose:
        set_global_log_level("debug")
    elif log_level:
        set_global_log_level(log_level)

    config = ENGINE_CONFIG
    if config_file:
        try:
            config = EngineConfig.from_file(config_file)
        except ValueError as exc:
            raise click.ClickException(f"Invalid config: {exc}")
    ctx.obj = config


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("source")
@click.argument("target")
@click.pass_obj
def path(config, topology_file, source, target):
    """Shortest path from SOURCE to TARGET."""
    from .paths.enumerate import k_paths

    topology = _load(topology_file)
    results = k_paths(topology, source, target, k=1,
                      duplicate_policy=config.duplicate_policy)
    if not results:
        click.echo(f"No path from {source} to {target}")
        return

    _echo_path(results[0])


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("source")
@click.argument("target")
@click.option("--k", "-k", "k", default=None, type=int, help="Number of paths")
@click.option("--strategy", "-s", type=click.Choice(["backup", "disjoint", "yen"]),
              default="backup")
@click.option("--output", "-o", default=None, help="Save paths to JSON")
@click.pass_obj
def kpaths(config, topology_file, source, target, k, strategy, output):
    """Primary and alternate paths from SOURCE to TARGET."""
    from .paths.enumerate import k_paths

    topology = _load(topology_file)
    results = k_paths(topology, source, target, k=k or config.default_k,
                      strategy=strategy, duplicate_policy=config.duplicate_policy)
    if not results:
        click.echo(f"No path from {source} to {target}")
        return

    for i, result in enumerate(results):
        click.echo(f"\n--- {'Primary' if i == 0 else f'Alternate {i}'} ---")
        _echo_path(result)

    if output:
        _save(output, [r.to_dict() for r in results])


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("source")
@click.argument("target")
@click.option("--limit", default=None, type=int, help="Maximum number of paths")
@click.pass_obj
def ecmp(config, topology_file, source, target, limit):
    """Equal-cost shortest paths from SOURCE to TARGET."""
    from .graph.builder import build_graph
    from .paths.solver import equal_cost_paths

    topology = _load(topology_file)
    G = build_graph(topology, config.duplicate_policy)
    paths = equal_cost_paths(G, source, target, limit=limit)
    if not paths:
        click.echo(f"No path from {source} to {target}")
        return

    click.echo(f"{len(paths)} equal-cost path(s):")
    for p in paths:
        click.echo(f"  {' -> '.join(p)}")


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("link_id")
@click.option("--cost", "-c", type=int, default=None, help="Simulated link cost")
@click.option("--down", is_flag=True, help="Simulate link down (OSPF max cost)")
@click.option("--output", "-o", default=None, help="Save report to JSON")
@click.pass_obj
def blast(config, topology_file, link_id, cost, down, output):
    """Blast radius of changing LINK_ID's cost."""
    from .impact.blast_radius import ImpactAnalyzer

    topology = _load(topology_file)
    link = topology.link(link_id)
    if link is None:
        raise click.ClickException(f"Unknown link: {link_id}")
    if not down and (cost is None or cost < 1):
        raise click.UsageError("Provide --cost >= 1 or --down")

    analyzer = ImpactAnalyzer(config)
    if down:
        result = analyzer.simulate_link_down(topology, link_id)
    else:
        result = analyzer.blast_radius(topology, link_id, cost)

    click.echo(f"\n--- Blast Radius: {link_id} ({link.source} <-> {link.target}) ---")
    click.echo(f"Cost: {link.fwd} -> {result.new_cost}")
    click.echo(f"Severity: {result.severity}")
    click.echo(f"Affected Nodes: {len(result.affected_nodes)}/{result.total_nodes} "
               f"({result.impact_pct:.1f}%)")
    click.echo(f"Affected Paths: {len(result.affected_paths)} "
               f"({result.path_changes} rerouted)")
    for p in result.affected_paths[:10]:
        marker = "rerouted" if p.path_changed else "cost only"
        click.echo(f"  {p.source} -> {p.target}: {p.old_cost} -> {p.new_cost} ({marker})")

    if output:
        _save(output, result.to_dict())


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.option("--output", "-o", default=None, help="Save report to JSON")
@click.pass_obj
def impact(config, topology_file, output):
    """Link-down impact ranking for every link."""
    from .impact.blast_radius import ImpactAnalyzer

    topology = _load(topology_file)
    report = ImpactAnalyzer(config).analyze(topology)

    click.echo(f"\n--- Link Failure Impact ---")
    click.echo(f"Resilience Score: {report.overall_resilience:.2f}")
    click.echo(f"Resilience Grade: {report.summary['resilience_grade']}")
    click.echo(f"Single Points of Failure: {report.summary['single_points_of_failure']}")
    click.echo(f"\nMost Impactful Links:")
    for li in report.link_impacts[:5]:
        click.echo(f"  {li.link_id}: {li.affected_pairs} pairs, "
                   f"{li.affected_nodes} nodes, {li.broken_pairs} cut off ({li.severity})")

    if output:
        _save(output, {
            "summary": report.summary,
            "link_impacts": [li.to_dict() for li in report.link_impacts],
        })


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("link_ids", nargs=-1, required=True)
@click.option("--output", "-o", default=None, help="Save report to JSON")
@click.pass_obj
def fail(config, topology_file, link_ids, output):
    """Remove LINK_IDS together and report lost and rerouted pairs."""
    from .impact.blast_radius import ImpactAnalyzer

    topology = _load(topology_file)
    result = ImpactAnalyzer(config).simulate_failures(topology, link_ids)
    if not result.failed_links:
        raise click.ClickException(f"Unknown link(s): {', '.join(result.unknown_links)}")

    click.echo(f"\n--- Failure Simulation: {', '.join(result.failed_links)} ---")
    if result.unknown_links:
        click.echo(f"Ignored unknown: {', '.join(result.unknown_links)}")
    click.echo(f"Reachability: {result.reachability_score:.1f}% "
               f"({len(result.unreachable_pairs)}/{result.total_pairs} pairs cut off)")
    click.echo(f"Affected Paths: {result.affected_paths} "
               f"({len(result.rerouted_pairs)} rerouted)")
    for s, t in result.unreachable_pairs[:10]:
        click.echo(f"  {s} -x- {t}")

    if output:
        _save(output, result.to_dict())


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.option("--output", "-o", default=None, help="Save report to JSON")
@click.pass_obj
def analyze(config, topology_file, output):
    """Deep analysis: country paths, network stats, critical links."""
    from .analytics.deep import NetworkAnalytics

    topology = _load(topology_file)
    result = NetworkAnalytics(config).analyze(topology)
    stats = result.network_stats

    click.echo(f"\n--- Network Analysis ---")
    click.echo(f"Nodes: {stats.total_nodes}, Links: {stats.total_links}")
    click.echo(f"Countries: {', '.join(stats.countries) or '-'}")
    click.echo(f"Average Path Cost: {stats.avg_path_cost:.1f}")
    click.echo(f"Hop Count: min {stats.shortest_path}, max {stats.longest_path}")
    click.echo(f"Redundancy Score: {stats.redundancy_score:.1f}%")
    click.echo(f"Critical Links: {stats.critical_links}")

    if result.country_paths:
        click.echo(f"\nCountry Paths:")
        for cp in result.country_paths:
            best = cp.best_path
            best_str = f"{' -> '.join(best.path)} (cost {best.cost})" if best else "unreachable"
            click.echo(f"  {cp.source_country} <-> {cp.target_country}: {best_str}, "
                       f"avg {cp.avg_cost:.1f} over {cp.total_paths} path(s)")

    if output:
        _save(output, result.to_dict())


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.argument("source")
@click.argument("target")
@click.option("--bandwidth", "-b", default=0.0, help="Required bandwidth (Mbps)")
@click.option("--cost-weight", "-w", default=0.5, type=click.FloatRange(0, 1),
              help="0-1, higher favors cost over bandwidth")
@click.option("--k", "-k", "k", default=5, help="Maximum number of paths")
@click.option("--output", "-o", default=None, help="Save paths to JSON")
@click.pass_obj
def rank(config, topology_file, source, target, bandwidth, cost_weight, k, output):
    """Bandwidth-aware path ranking from SOURCE to TARGET."""
    from .capacity.bandwidth import BandwidthRanker

    topology = _load(topology_file)
    results = BandwidthRanker(config).rank_paths(
        topology, source, target, bandwidth, cost_weight, k
    )
    if not results:
        click.echo(f"No path from {source} to {target} with {bandwidth} Mbps available")
        return

    for i, p in enumerate(results, 1):
        click.echo(f"{i}. {' -> '.join(p.path)}")
        click.echo(f"   cost={p.ospf_cost} available={p.available_bandwidth:.0f} Mbps "
                   f"bottleneck={p.bottleneck_link} score={p.score:.3f}")

    if output:
        _save(output, [p.to_dict() for p in results])


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.option("--growth", "-g", default=None, type=float,
              help="Project uniform traffic growth (percent)")
@click.option("--output", "-o", default=None, help="Save report to JSON")
def capacity(topology_file, growth, output):
    """Link utilization, congestion and growth headroom."""
    from .capacity.stats import capacity_stats

    topology = _load(topology_file)
    stats = capacity_stats(topology, growth_pct=growth)
    if stats is None:
        click.echo("No links with both capacity and utilization")
        return

    click.echo(f"\n--- Capacity ---")
    click.echo(f"Measured Links: {len(stats.links_with_capacity)}")
    click.echo(f"Average Utilization: {stats.avg_utilization:.1f}%")
    click.echo(f"Capacity: {stats.used_capacity:.0f}/{stats.total_capacity:.0f} Mbps used "
               f"({stats.headroom_pct:.1f}% headroom)")
    click.echo(f"Congested (>80%): {stats.congested_links}")
    click.echo(f"Warning (60-80%): {stats.warning_links}")
    if stats.growth:
        click.echo(f"At risk after {stats.growth.growth_pct:g}% growth: "
                   f"{stats.growth.at_risk_count}")

    if output:
        _save(output, stats.to_dict())


@cli.command()
@click.argument("topology_file", type=click.Path(exists=True))
@click.option("--output", "-o", default=None, help="Save report to JSON")
def asymmetry(topology_file, output):
    """Links with unequal forward and reverse cost."""
    from .impact.asymmetry import asymmetry_summary

    topology = _load(topology_file)
    summary = asymmetry_summary(topology)

    click.echo(f"Asymmetric Links: {summary['asymmetric_count']}/{summary['total_links']}")
    for entry in summary["links"]:
        click.echo(f"  {entry['link_id']}: {entry['forward_cost']} / "
                   f"{entry['reverse_cost']} ({entry['severity']})")

    if output:
        _save(output, summary)


@cli.command()
@click.option("--host", default="127.0.0.1", help="API host")
@click.option("--port", "-p", default=5000, help="API port")
@click.option("--topology", "-t", "topology_file", default=None,
              type=click.Path(exists=True), help="Pre-load topology file")
@click.pass_obj
def serve(config, host, port, topology_file):
    """Start the REST API."""
    from .api.routes import OSPFGraphAPI

    api = OSPFGraphAPI(config)
    if topology_file:
        topology = _load(topology_file)
        api.set_topology(topology)
        click.echo(f"Loaded topology: {len(topology.nodes)} nodes, {len(topology.links)} links")

    click.echo(f"Starting OSPFGraph API on {host}:{port}")
    api.create_app().run(host=host, port=port)


@cli.command()
@click.pass_obj
def demo(config):
    """Run a demo with a sample multi-country topology."""
    from .analytics.deep import NetworkAnalytics
    from .capacity.bandwidth import BandwidthRanker
    from .impact.blast_radius import ImpactAnalyzer
    from .paths.enumerate import k_paths

    click.echo("=" * 60)
    click.echo("  OSPFGraph Demo — Path & Impact Analysis")
    click.echo("=" * 60)

    click.echo("\n[1/4] Building sample topology...")
    topology = _build_demo_topology()
    click.echo(f"  Nodes: {len(topology.nodes)}, Links: {len(topology.links)}")

    click.echo("\n[2/4] Paths lon-r1 -> fra-r2...")
    for result in k_paths(topology, "lon-r1", "fra-r2", k=2):
        click.echo(f"  {' -> '.join(result.path)} (cost {result.cost}, "
                   f"reverse {result.reverse_cost})")

    click.echo("\n[3/4] Blast radius of lon-par going down...")
    br = ImpactAnalyzer(config).simulate_link_down(topology, "lon-par")
    click.echo(f"  {len(br.affected_paths)} pairs affected, severity {br.severity}")

    click.echo("\n[4/4] Deep analysis and bandwidth ranking...")
    stats = NetworkAnalytics(config).analyze(topology).network_stats
    click.echo(f"  Redundancy: {stats.redundancy_score:.1f}%  Critical: {stats.critical_links}")
    ranked = BandwidthRanker(config).rank_paths(topology, "lon-r1", "fra-r2", 2000, 0.5, 3)
    for p in ranked:
        click.echo(f"  {' -> '.join(p.path)} score={p.score:.3f}")

    click.echo("\n" + "=" * 60)
    click.echo("  Demo complete!")
    click.echo("=" * 60)


def _load(filepath: str) -> Topology:
    try:
        return load_topology(filepath)
    except TopologyError as exc:
        raise click.ClickException(str(exc))


def _save(filepath: str, data):
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    click.echo(f"\nSaved to {filepath}")


def _echo_path(result):
    click.echo(f"Path: {' -> '.join(result.path)}")
    click.echo(f"Cost: {result.cost} (forward {result.forward_cost}, "
               f"reverse {result.reverse_cost}), hops: {result.hops}")
    if result.min_capacity is not None:
        click.echo(f"Min Capacity: {result.min_capacity} Mbps")
    if result.bottleneck:
        b = result.bottleneck
        click.echo(f"Bottleneck: {b.link_id} ({b.available:.0f} Mbps free, "
                   f"{b.utilization}% used)")


def _build_demo_topology() -> Topology:
    """A small two-site-per-country backbone for demos."""
    nodes = [
        Node("lon-r1", "London R1", country="GB", type="core"),
        Node("lon-r2", "London R2", country="GB", type="core"),
        Node("par-r1", "Paris R1", country="FR", type="core"),
        Node("par-r2", "Paris R2", country="FR", type="edge"),
        Node("fra-r1", "Frankfurt R1", country="DE", type="core"),
        Node("fra-r2", "Frankfurt R2", country="DE", type="edge"),
    ]
    links = [
        Link("lon-core", "lon-r1", "lon-r2", cost=5, capacity=100000, utilization=20),
        Link("par-core", "par-r1", "par-r2", cost=5, capacity=10000, utilization=35),
        Link("fra-core", "fra-r1", "fra-r2", cost=5, capacity=10000, utilization=30),
        Link("lon-par", "lon-r1", "par-r1", cost=10, capacity=10000, utilization=85),
        Link("lon-fra", "lon-r2", "fra-r1", cost=20, capacity=100000, utilization=40,
             type="backbone"),
        Link("par-fra", "par-r1", "fra-r1", cost=10, forward_cost=10, reverse_cost=25,
             capacity=10000, utilization=60, type="asymmetric"),
        Link("par-fra-2", "par-r2", "fra-r2", cost=30, capacity=1000, utilization=10),
    ]
    return Topology(nodes=nodes, links=links, metadata={"name": "demo"})


if __name__ == "__main__":
    cli()
