"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import sys
import tempfile
import shutil

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.config import PipelineConfig


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_text():
    """Sample text for testing"""
    return """Listen! Silent nights, tins.
The bat sat on a tab.
Evil lives: a vile veil.
cat cat dog
Don't stop the pots, spot the tops."""


@pytest.fixture
def sample_input_file(temp_dir, sample_text):
    """Create a sample input file for testing"""
    filepath = os.path.join(temp_dir, 'input.txt')
    with open(filepath, 'w') as f:
        f.write(sample_text)
    return filepath


@pytest.fixture
def stop_words_file(temp_dir):
    """Comma-separated stop-word list"""
    filepath = os.path.join(temp_dir, 'stop_words.txt')
    with open(filepath, 'w') as f:
        f.write('the,a,on')
    return filepath


@pytest.fixture
def pipeline_config(temp_dir, sample_input_file, stop_words_file):
    """Configuration writing into <temp_dir>/output"""
    return PipelineConfig(
        input_path=sample_input_file,
        output_dir=os.path.join(temp_dir, 'output'),
        num_partitions=5,
        stop_words_path=stop_words_file
    )
