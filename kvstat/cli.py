import random
import sys

import click

from . import reports
from .config import STATS, VMPAGE_PAGES, Config
from .errors import KvStatError
from .store import CsvStore, ValkeyStore

def open_store(cfg, from_csv, rnd):
    if from_csv:
        return CsvStore.from_csv(from_csv, rnd)

    store = ValkeyStore.connect(cfg.host, cfg.port, auth=cfg.auth, db=cfg.db)
    if cfg.auth is not None:
        print("AUTH succeeded.")
    return store

@click.command()
@click.argument('stat', type=click.Choice(STATS), default='overview')
@click.option('--host', default='127.0.0.1', help='Server hostname')
@click.option('-p', '--port', default=6379, help='Server port')
@click.option('-a', '--auth', default=None, help='Server password')
@click.option('-n', '--db', default=0, help='Database number')
@click.option('-d', '--delay', default=1000, help='Delay between requests in milliseconds')
@click.option('-c', '--count', type=int, default=None, help='Stop the polling reports after these many lines')
@click.option('-s', '--samplesize', default=10000, help="Number of keys to sample for 'vmpage' and 'ondisk-size'")
@click.option('--retry-budget', type=int, default=None, help='Max draws to discard (zero or unknown length) while sampling')
@click.option('--logscale', is_flag=True, default=False, help='Use power-of-two logarithmic scale in graphs')
@click.option('--pages', default=VMPAGE_PAGES, help="Swap file page count simulated by 'vmpage'")
@click.option('--seed', type=int, default=None, help='Seed for the random source')
@click.option('--from-csv', type=click.Path(exists=True, dir_okay=False), default=None, help="Sample sizes from a CSV file ('size' column) instead of a server")
@click.option('--save-maps', default=None, help="Save the fragmentation map of each page size as <prefix>_<size>.png ('vmpage')")
@click.option('--save-plot', default=None, help="Save the histogram figure into this file ('ondisk-size')")
@click.option('--show-progress/--no-show-progress', default=True)
def main(stat, host, port, auth, db, delay, count, samplesize, retry_budget, logscale, pages, seed, from_csv, save_maps, save_plot, show_progress):
    ''' Statistics about a Redis/Valkey instance.

        \b
        overview (default)   General information about the instance.
        vmstat               Information about the VM activity.
        vmpage               Guess the best vm-page-size for the dataset.
        ondisk-size          Stats and graph about the values' length once stored on disk.
        latency              Measure the server latency.
    '''
    try:
        cfg = Config(
                stat=stat,
                host=host,
                port=port,
                auth=auth,
                db=db,
                delay=max(0, delay),
                count=count,
                samplesize=samplesize,
                retry_budget=retry_budget,
                logscale=logscale,
                pages=pages,
                seed=seed,
                show_progress=show_progress,
                )
    except ValueError as err:
        raise click.UsageError(str(err))

    if save_maps and stat != 'vmpage':
        raise click.UsageError("--save-maps only applies to 'vmpage'")
    if save_plot and stat != 'ondisk-size':
        raise click.UsageError("--save-plot only applies to 'ondisk-size'")

    rnd = random.Random(cfg.seed)
    try:
        store = open_store(cfg, from_csv, rnd)
        reports.run(cfg, store, rnd, save_maps=save_maps, save_plot=save_plot)
    except KvStatError as err:
        print(f"Error: {err}")
        sys.exit(1)
