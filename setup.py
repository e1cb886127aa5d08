# -*- coding: utf-8 -*-

from setuptools import setup

setup(
    name='csgsi',
    version='0.1.0',
    description='Listener for CS:GO game state integration pushes',
    packages=['csgsi'],
    python_requires='>=3.9',
    install_requires=[
      'Flask>=2.3.2',
      'waitress>=2.1.2',
      'werkzeug>=2.3.3',
      'pydantic>=2.5',
      'vdf>=3.4',
    ],
    tests_require=[
      'pytest>=6.2.4',
    ],
    extras_require={
      'test': ['pytest>=6.2.4'],
    },
    classifiers=[
      'Programming Language :: Python :: 3',
      'License :: OSI Approved :: MIT License',
      'Operating System :: OS Independent',
    ],
)
