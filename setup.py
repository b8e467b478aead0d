from setuptools import setup, find_packages

setup(
    name='gitflow-hotfix',
    packages=find_packages(exclude=['tests', 'tests.*']),
    version='0.1',
    description='git-flow hotfix workflow: start, merge into develop/release and master, tag and clean up.',
    author='Zhang Yanwei',
    author_email='verdigris@163.com',
    keywords=['git', 'git-flow', 'hotfix'],
    python_requires='>=3.9',
    install_requires=[
        'paramiko >= 2.4.1',
        'PyYAML >= 5.1',
        'requests'
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio'
        ]
    },
    entry_points={
        'console_scripts': [
            'gitflow = gitflow.cli:main'
        ]
    },
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries',
        'Topic :: Software Development :: Version Control :: Git',
        "Topic :: Utilities"
    ]
)
