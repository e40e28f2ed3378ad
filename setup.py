from setuptools import setup, find_packages

setup(
    name='pasteval',
    version='0.1.0',
    py_modules=['pasteval', 'evaluator'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'lark',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'pasteval = pasteval:main',
        ],
    },
)
