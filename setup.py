#!/usr/bin/env python
"""Setuptools distribution file."""
import os
from setuptools import setup


def _get_here(fname):
    return os.path.join(os.path.dirname(__file__), fname)


def _get_long_description(fname, encoding='utf8'):
    with open(fname, 'r', encoding=encoding) as fin:
        return fin.read()


setup(name='fibsterm',
      version='0.1.0',
      license='ISC',
      description="Terminal client for FIBS-style talker servers",
      long_description=_get_long_description(fname=_get_here('README.rst')),
      long_description_content_type='text/x-rst',
      packages=['fibsterm'],
      python_requires='>=3.8',
      install_requires=['blessed>=1.20', 'wcwidth'],
      extras_require={'test': ['pytest', 'pexpect']},
      entry_points={
         'console_scripts': [
             'fibsterm = fibsterm.client:main',
         ]},
      platforms='posix',
      zip_safe=True,
      keywords=', '.join(('fibs', 'backgammon', 'talker', 'mud', 'client',
                          'terminal', 'tcp')),
      classifiers=['License :: OSI Approved :: ISC License (ISCL)',
                   'Programming Language :: Python :: 3',
                   'Intended Audience :: End Users/Desktop',
                   'Development Status :: 3 - Alpha',
                   'Environment :: Console',
                   'Operating System :: POSIX',
                   'Topic :: Games/Entertainment :: Board Games',
                   'Topic :: Terminals :: Telnet',
                   ],
      )
