from setuptools import setup, find_packages
from transitive import VERSION

with open('README.md') as fd:
    read_me = fd.read()

# noinspection SpellCheckingInspection
setup(
    name='transitive-dependencies',
    version=VERSION,
    description='Transitive Dependency Resolver',
    long_description=read_me,
    long_description_content_type='text/markdown',
    license='Apache 2.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'click', 'requests', 'PyYAML', 'stringcase'
    ],
    extras_require={
        'test': ['pytest']
    },
    python_requires='>=3.7.0',
    entry_points='''
        [console_scripts]
        transitive=transitive.main:cli
    ''',
)
