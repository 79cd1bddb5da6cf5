#!/usr/bin/env python

# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from setuptools import (
    find_packages,
    setup,
)


PROJECT_NAME = 'bakeryclient'

# version 0.1.0
VERSION = (0, 1, 0)


def get_version():
    '''Return the bakery client version as a string.'''
    return '.'.join(map(str, VERSION))


with open('README.rst') as readme_file:
    readme = readme_file.read()

requirements = [
    'requests>=2.18.1,<3.0',
    'pymacaroons>=0.12.0,<1.0',
]

test_requirements = [
    'httmock>=1.2.5',
    'pytest',
]

setup(
    name=PROJECT_NAME,
    version=get_version(),
    description='A Python client for the macaroon bakery HTTP protocol, '
                'acquiring discharge macaroons transparently',
    long_description=readme,
    author="Juju UI Team",
    author_email='juju-gui@lists.ubuntu.com',
    packages=find_packages(),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        'test': test_requirements,
    },
    python_requires='>=3.7',
    license="LGPL3",
    zip_safe=False,
    keywords='macaroon cookie bakery discharge',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
    ],
    tests_require=test_requirements,
)
