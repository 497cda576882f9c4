"""
Command-line interface for crisprbase.
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .core.cutting import cut_offset_in_protospacer, cut_sites, get_cut_sites
from .core.extraction import (
    extract_pam_from_target,
    extract_protospacer_from_target,
    extract_spacer_from_target,
)
from .core.notation import parse_motif_notation
from .core.ranges import REGIONS, get_ranges
from .errors import CrisprBaseError


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _resolve_nuclease(name, config):
    """Look up a nuclease, searching a YAML nuclease file first if given."""
    from .config import load_nucleases
    from .nucleases import get_nuclease

    extra = load_nucleases(Path(config)) if config else None
    return get_nuclease(name, extra=extra)


def _load_anchor_table(anchors, chrom, pam_site, strand, strict=True):
    import pandas as pd

    from .io.anchors import load_anchors

    if anchors:
        return load_anchors(Path(anchors), strict=strict)
    if chrom is None or pam_site is None or strand is None:
        click.echo("Error: Provide --anchors or all of --chrom, --pam-site and --strand", err=True)
        sys.exit(1)
    return pd.DataFrame({'chr': [chrom], 'pam_site': [pam_site], 'strand': [strand]})


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """crisprbase: nuclease models and CRISPR target coordinates."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command('parse-motif')
@click.argument('motifs', nargs=-1, required=True)
def parse_motif(motifs):
    """
    Parse recognition motifs written in REBASE notation.

    \b
    Example:
      crisprbase parse-motif 'G^AATTC' 'GACGC(5/10)' '(3/3)NGG'
    """
    click.echo("motif\tsequence\tcut_forward\tcut_reverse")
    for text in motifs:
        try:
            record = parse_motif_notation(text)
        except ValueError as e:
            click.echo(f"Error parsing motif {text!r}: {e}", err=True)
            sys.exit(1)
        fwd = '' if record.cut_forward is None else record.cut_forward
        rev = '' if record.cut_reverse is None else record.cut_reverse
        click.echo(f"{text}\t{record.sequence}\t{fwd}\t{rev}")


@cli.command('list-nucleases')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML file with additional nuclease definitions')
def list_nucleases(config):
    """List built-in (and configured) nucleases."""
    from .config import load_nucleases
    from .nucleases import NUCLEASES, RESTRICTION_ENZYMES

    registries = [NUCLEASES, RESTRICTION_ENZYMES]
    if config:
        try:
            registries.insert(0, load_nucleases(Path(config)))
        except ValueError as e:
            click.echo(f"Error loading nuclease definitions: {e}", err=True)
            sys.exit(1)

    click.echo("name\tkind\ttarget\tmotifs")
    for registry in registries:
        for name, nuclease in registry.items():
            motifs = ','.join(m.to_notation() for m in nuclease.motifs)
            click.echo(
                f"{name}\t{nuclease.kind.value}\t{nuclease.target_type.value}\t{motifs}"
            )


@cli.command()
@click.option('--nuclease', '-n', type=str, required=True,
              help='Nuclease name (e.g. SpCas9, AsCas12a)')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML file with nuclease definitions and engine settings')
@click.option('--anchors', '-a', type=click.Path(exists=True),
              help='TSV with chr, pam_site and strand columns')
@click.option('--chrom', type=str, help='Chromosome of a single anchor')
@click.option('--pam-site', type=int, help='PAM site of a single anchor')
@click.option('--strand', type=click.Choice(['+', '-']), help='Strand of a single anchor')
@click.option('--region', '-r', type=click.Choice(list(REGIONS) + ['all']), default='all',
              help='Region to report (default: all)')
@click.option('--threads', '-t', type=int, default=None,
              help='Worker processes for large batches')
@click.option('--keep-going', is_flag=True,
              help='Report invalid anchors per row instead of failing the batch')
@click.option('--output', '-o', type=click.Path(),
              help='Output TSV (default: stdout)')
@click.pass_context
def ranges(ctx, nuclease, config, anchors, chrom, pam_site, strand, region,
           threads, keep_going, output):
    """
    Compute PAM, protospacer, spacer and target ranges from PAM sites.

    \b
    Example:
      crisprbase ranges -n SpCas9 --chrom chr7 --pam-site 200 --strand +
      crisprbase ranges -n AsCas12a -a anchors.tsv -o ranges.tsv
    """
    from .config import EngineConfig
    from .io.output import ranges_to_frame, write_ranges_tsv

    _setup_logging(ctx.obj.get('verbose', False))

    try:
        model = _resolve_nuclease(nuclease, config)
        engine = EngineConfig.from_yaml(Path(config)) if config else EngineConfig()
        if threads is not None:
            engine.n_workers = threads
        if keep_going:
            engine.collect_errors = True
        table = _load_anchor_table(
            anchors, chrom, pam_site, strand, strict=not engine.collect_errors
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    regions = list(REGIONS) if region == 'all' else [region]
    frames = []
    try:
        for name in regions:
            result = get_ranges(
                name,
                list(table['chr']),
                list(table['pam_site']),
                list(table['strand']),
                model,
                **engine.batch_options(),
            )
            frames.append(ranges_to_frame(result, region=name))
    except CrisprBaseError as e:
        click.echo(f"Error computing ranges: {e}", err=True)
        sys.exit(1)

    if output:
        write_ranges_tsv(frames, Path(output))
        click.echo(f"Results written to: {output}")
    else:
        import pandas as pd
        click.echo(pd.concat(frames, ignore_index=True).to_csv(sep='\t', index=False), nl=False)


@cli.command('cut-sites')
@click.option('--nuclease', '-n', type=str, required=True, help='Nuclease name')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML file with nuclease definitions')
@click.option('--anchors', '-a', type=click.Path(exists=True),
              help='TSV with chr, pam_site and strand columns')
@click.option('--chrom', type=str, help='Chromosome of a single anchor')
@click.option('--pam-site', type=int, help='PAM site of a single anchor')
@click.option('--strand', type=click.Choice(['+', '-']), help='Strand of a single anchor')
@click.option('--cut-strand', type=click.Choice(['original', 'opposite']), default=None,
              help='Strand whose cut is reported (nickases use their nicking strand)')
@click.option('--midpoint', is_flag=True, help='Report the midpoint of staggered cuts')
@click.option('--output', '-o', type=click.Path(), help='Output TSV (default: stdout)')
@click.pass_context
def cut_sites_cmd(ctx, nuclease, config, anchors, chrom, pam_site, strand,
                  cut_strand, midpoint, output):
    """
    Report cut offsets of a nuclease, or cut sites for a set of anchors.

    Without anchors, prints the cut offset of each motif relative to its
    first nucleotide (and within the protospacer for CRISPR nucleases).
    """
    from .config import EngineConfig
    from .io.output import cut_sites_to_frame

    _setup_logging(ctx.obj.get('verbose', False))

    try:
        model = _resolve_nuclease(nuclease, config)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not anchors and chrom is None and pam_site is None and strand is None:
        try:
            fwd = cut_sites(model, strand='+', combine=False, midpoint=midpoint)
            rev = cut_sites(model, strand='-', combine=False, midpoint=midpoint)
            offset = None
            if model.is_crispr:
                offset = cut_offset_in_protospacer(model, cut_strand=cut_strand, midpoint=midpoint)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        click.echo("motif\tcut_forward\tcut_reverse")
        for motif, f, r in zip(fwd.index, fwd.tolist(), rev.tolist()):
            click.echo(f"{motif}\t{f}\t{r}")
        if offset is not None:
            click.echo(f"Cut in protospacer (0-based, primary PAM): {offset}")
        return

    try:
        engine = EngineConfig.from_yaml(Path(config)) if config else EngineConfig()
        table = _load_anchor_table(
            anchors, chrom, pam_site, strand, strict=not engine.collect_errors
        )
        sites = get_cut_sites(
            list(table['chr']),
            list(table['pam_site']),
            list(table['strand']),
            model,
            cut_strand=cut_strand,
            midpoint=midpoint,
            **engine.batch_options(),
        )
    except ValueError as e:
        click.echo(f"Error computing cut sites: {e}", err=True)
        sys.exit(1)

    df = cut_sites_to_frame(table, sites)
    if output:
        df.to_csv(output, sep='\t', index=False)
        click.echo(f"Results written to: {output}")
    else:
        click.echo(df.to_csv(sep='\t', index=False), nl=False)


@cli.command()
@click.option('--nuclease', '-n', type=str, required=True, help='Nuclease name')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML file with nuclease definitions')
@click.argument('targets', nargs=-1, required=True)
def extract(nuclease, config, targets):
    """
    Split target sequences into PAM, protospacer and spacer.

    \b
    Example:
      crisprbase extract -n SpCas9 GCTGAAGCACTGCACGCCGTAGG
    """
    try:
        model = _resolve_nuclease(nuclease, config)
        pams = extract_pam_from_target(list(targets), model)
        protospacers = extract_protospacer_from_target(list(targets), model)
        spacers = extract_spacer_from_target(list(targets), model)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("target\tpam\tprotospacer\tspacer")
    for row in zip(targets, pams, protospacers, spacers):
        click.echo('\t'.join(row))


if __name__ == '__main__':
    cli()
