from setuptools import setup, find_packages

requirements = open('requirements.txt').read().split('\n\n')

setup(
    name="storagelayer",
    version="0.1.0",
    packages=find_packages(exclude=['tests']),
    py_modules=['app'],
    install_requires=requirements[0].split(),
    extras_require={'test': requirements[1].split()},
    author="ZisIsNotZis",
    author_email="ZisIsNotZis@Gmail.com",
    description="Supabase client with an in-memory fallback behind one query chain",
)
