import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join('src', 'splitbreak', '__init__.py')) as fh:
        match = re.search(r"^__version__\s*=\s*'([^']+)'", fh.read(), re.MULTILINE)
    return match.group(1)


def parse_md_readme():
    try:
        with open('README.md') as fh:
            return fh.read()
    except OSError:
        return ''


# HSTLIB is a dependency for pysam.
# The cram file libraries fail for some OS versions and splitbreak does not use cram files so we disable these options
os.environ['HTSLIB_CONFIGURE_OPTIONS'] = '--disable-lzma --disable-bz2 --disable-libcurl'


TEST_REQS = [
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.70',
    'numpy>=1.13.1',
    'pysam>=0.9',
]


setup(
    name='splitbreak',
    version=get_version(),
    packages=find_packages(where='src', exclude=['tests']),
    package_dir={'': 'src'},
    description='Structural variant breakpoint evidence from split read alignments',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS,
    },
    python_requires='>=3.7',
    test_suite='tests',
)
