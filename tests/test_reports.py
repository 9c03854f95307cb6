import os

import pytest

from kvstat import reports
from kvstat.config import Config
from kvstat.errors import StoreError
from kvstat.store import CsvStore

def test_bytes_to_human():
    assert reports.bytes_to_human(0) == "0B"
    assert reports.bytes_to_human(100) == "100B"
    assert reports.bytes_to_human(2048) == "2.00K"
    assert reports.bytes_to_human(3 * 1024**2) == "3.00M"
    assert reports.bytes_to_human(5 * 1024**3) == "5.00G"
    assert reports.bytes_to_human(-2048) == "-2.00K"

def test_overview_line():
    info = {
            'db0': {'keys': 10, 'expires': 0},
            'db3': {'keys': 5, 'expires': 1},
            'used_memory': 2048,
            'connected_clients': 3,
            'blocked_clients': 1,
            'total_commands_processed': 150,
            'total_connections_received': 7,
            'rdb_bgsave_in_progress': 1,
            'aof_rewrite_in_progress': 0,
            }
    line, requests = reports.overview_line(info, 100)

    assert requests == 150
    assert line.split()[:5] == ['15', '2.00K', '3', '1', '150']
    assert '(+50)' in line
    assert line.endswith('BGSAVE')

def test_child_marker():
    assert reports.child_marker({}) == ''
    assert reports.child_marker({'bgrewriteaof_in_progress': 1}) == 'AOFREWRITE'
    assert reports.child_marker({'bgsave_in_progress': 1, 'bgrewriteaof_in_progress': 1}) == 'BGSAVE+AOF'

def vm_info(pagein, pageout, swapped, used_pages, used_memory):
    return {
            'vm_stats_swappin_count': pagein,
            'vm_stats_swappout_count': pageout,
            'vm_stats_swapped_objects': swapped,
            'vm_stats_used_pages': used_pages,
            'used_memory': used_memory,
            }

def test_vmstat_line_deltas():
    prev = {field: 0 for field in reports.VMSTAT_FIELDS}
    _, prev = reports.vmstat_line(vm_info(10, 4, 100, 50, 4096), prev)

    line, cur = reports.vmstat_line(vm_info(15, 4, 90, 50, 2048), prev)
    assert line.split() == ['5', '0', '90', '-10', '50', '0', '2.00K', '-2.00K']
    assert cur['vm_stats_swappin_count'] == 15

def test_vmstat_without_vm():
    prev = {field: 0 for field in reports.VMSTAT_FIELDS}
    with pytest.raises(StoreError):
        reports.vmstat_line({'used_memory': 10}, prev)

def test_overview_loop(fake_store, capsys):
    info = {'db0': {'keys': 3}, 'used_memory': 10, 'total_commands_processed': 5}
    store = fake_store(infos=[info] * 3)

    reports.overview(Config(count=3, delay=0), store)

    out = capsys.readouterr().out.splitlines()
    assert out[:2] == list(reports.OVERVIEW_HEADER)
    assert len(out) == 5
    assert '(+5)' in out[2] and '(+0)' in out[3]

def test_latency_loop(fake_store, capsys):
    store = fake_store()
    reports.latency(Config(stat='latency', count=3, delay=0), store)

    out = capsys.readouterr().out.splitlines()
    assert [line.split(':')[0] for line in out] == ['1', '2', '3']
    assert all(line.endswith(' ms') for line in out)
    assert store.pings == 3

def small_vmpage_config(**kargs):
    params = dict(stat='vmpage', samplesize=50, pages=300, min_page_size=8,
            max_page_size=64, seed=3, show_progress=False)
    params.update(kargs)
    return Config(**params)

def test_vmpage_report(sizes_csv, capsys):
    import random
    cfg = small_vmpage_config()
    rnd = random.Random(cfg.seed)
    rec = reports.vmpage(cfg, CsvStore.from_csv(sizes_csv, rnd), rnd)

    out = capsys.readouterr().out
    assert "Sampling 50 random keys from DB 0..." in out
    assert "Standard deviation:" in out
    for page_size in (8, 16, 32, 64):
        assert f"\n{page_size}: bytes per page: " in out
    assert out.rstrip().endswith(f"swap file size: {rec.best_page_size}")
    assert rec.best_page_size in (8, 16, 32, 64)

def test_vmpage_report_saves_maps(sizes_csv, tmp_path):
    import random
    cfg = small_vmpage_config(max_page_size=16)
    rnd = random.Random(cfg.seed)
    prefix = str(tmp_path / "frag")
    reports.vmpage(cfg, CsvStore.from_csv(sizes_csv, rnd), rnd, save_maps=prefix)

    assert os.path.exists(prefix + "_8.png")
    assert os.path.exists(prefix + "_16.png")

def test_ondisk_size_report(fake_store, capsys):
    store = fake_store(lengths=[10, 20, 20, 40])
    cfg = Config(stat='ondisk-size', samplesize=4, logscale=True, show_progress=False)
    reports.ondisk_size(cfg, store)

    out = capsys.readouterr().out.splitlines()
    assert "  Average: 22.50" in out
    assert out[-1] == ">  32".ljust(13) + " |" + "-" * 25 + " (25.00%)"
    assert out[-2] == "<= 32".ljust(13) + " |" + "-" * 50 + " (50.00%)"

def test_ondisk_size_report_saves_plot(fake_store, tmp_path):
    store = fake_store(lengths=[3, 7, 7, 12, 30])
    cfg = Config(stat='ondisk-size', samplesize=5, show_progress=False)
    fname = str(tmp_path / "hist.png")
    reports.ondisk_size(cfg, store, save_plot=fname)

    assert os.path.exists(fname)

def test_vmpage_report_closes_progress_on_error(sizes_csv, tmp_path):
    import random
    import tqdm
    cfg = small_vmpage_config(max_page_size=16, show_progress=True)
    rnd = random.Random(cfg.seed)
    prefix = str(tmp_path / "missing" / "frag")

    with pytest.raises(OSError):
        reports.vmpage(cfg, CsvStore.from_csv(sizes_csv, rnd), rnd, save_maps=prefix)

    assert len(getattr(tqdm.tqdm, '_instances', ())) == 0

def test_ondisk_size_without_data(monkeypatch, capsys):
    from kvstat.sampler import SampleSet
    monkeypatch.setattr(reports, 'sample_dataset', lambda cfg, store: SampleSet(()))

    hist = reports.ondisk_size(Config(stat='ondisk-size', show_progress=False), store=None)

    assert hist.total == 0
    assert capsys.readouterr().out.splitlines() == ["No data to display."]
