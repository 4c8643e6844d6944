from setuptools import setup, find_packages

setup(
    name='cepracer',
    version='0.1.0',
    packages=find_packages(exclude=['examples', 'examples.*']),
    platforms='any',
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
    ],
    license='Apache',
    python_requires='>=3.8',
    install_requires=['httpx', 'pydantic>=2', 'pydantic-settings'],
    extras_require={'test': ['pytest', 'pytest-asyncio']},
    entry_points={'console_scripts': ['cepracer = cepracer.cli:main']},
    description='Resolve Brazilian postal codes by racing BrasilAPI against ViaCEP',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
