from setuptools import find_packages, setup

setup(
    name='terraform-ops',
    version='0.1.0',
    py_modules=['terraform_ops'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'Click',
        'python-hcl2',
        'graphviz',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points='''
        [console_scripts]
        terraform-ops=terraform_ops:main
    ''',
)
