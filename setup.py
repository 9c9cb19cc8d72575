#!/usr/bin/env python
# coding: utf-8

from setuptools import setup, find_packages


setup(
    name='clusterator',
    version='0.1',
    license='BSD',
    description=
        'bootstraps consul, swarm and registrator on docker-machine hosts',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'docker>=4.0',
        'click>=7.0',
        'requests>=2.20',
        'pyyaml>=5.1',
        'clint>=0.5.1',
        'werkzeug>=2.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'mock',
        ],
    },
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
    entry_points="""
[console_scripts]
clusterator = clusterator.cli:run
""",
)
