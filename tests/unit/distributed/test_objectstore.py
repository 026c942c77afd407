import pytest

from fastcat.distributed import objectstore
from fastcat.distributed.objectstore import Location


@pytest.mark.parametrize(('url', 'expected'), [
    ('s3://bucket/prefix/run1', Location('s3', 'bucket', 'prefix/run1', None)),
    ('s3://bucket/prefix/run1/', Location('s3', 'bucket', 'prefix/run1', None)),
    ('s3://bucket@eu-central-1/key', Location('s3', 'bucket', 'key', 'eu-central-1')),
    ('s3://bucket', Location('s3', 'bucket', '', None)),
    ('gs://bucket/out/', Location('gs', 'bucket', 'out', None)),
    ('https://host.example/out', Location('https', 'host.example', 'out', None)),
    ('file:///data/stats', Location('file', None, '/data/stats', None)),
    ('/data/stats/', Location('file', None, '/data/stats', None)),
    ('stats', Location('file', None, 'stats', None)),
    ('/', Location('file', None, '/', None)),
])
def test_parse(url, expected):
    assert Location.parse(url) == expected


def test_parse_requires_bucket():
    with pytest.raises(ValueError):
        Location.parse('s3:///key')


@pytest.mark.parametrize(('base', 'parts', 'expected'), [
    ('s3://bucket/prefix/', ('S1_1.fastq.gz',), 's3://bucket/prefix/S1_1.fastq.gz'),
    ('s3://bucket/prefix', ('/S1_1.fastq.gz',), 's3://bucket/prefix/S1_1.fastq.gz'),
    ('s3://bucket', ('a/', '/b'), 's3://bucket/a/b'),
    ('s3://bucket@us-west-2/p', ('x',), 's3://bucket@us-west-2/p/x'),
    ('/data//stats/', ('S1_2.fastq.stats',), '/data/stats/S1_2.fastq.stats'),
    ('stats', ('S1_2.fastq.stats',), 'stats/S1_2.fastq.stats'),
    ('/', ('x',), '/x'),
    ('', ('x',), 'x'),
    ('s3://bucket/p', (), 's3://bucket/p'),
    ('gs://bucket/out', ('S1_1.fastq.gz',), 'gs://bucket/out/S1_1.fastq.gz'),
    ('https://host.example/out/', ('/S1_1.fastq.gz',), 'https://host.example/out/S1_1.fastq.gz'),
    ('https://user@host.example', ('out', 'S1_2.fastq.gz'), 'https://user@host.example/out/S1_2.fastq.gz'),
])
def test_join(base, parts, expected):
    assert str(Location.parse(base).join(*parts)) == expected


def test_is_remote():
    assert objectstore.is_remote('s3://bucket/key')
    assert not objectstore.is_remote('/local/key')
    assert Location.parse('s3://bucket/key').is_remote
    assert not Location.parse('/local/key').is_remote
    assert objectstore.is_remote('gs://bucket/key')
    assert not objectstore.is_remote('file:///local/key')
