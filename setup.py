from setuptools import setup, find_packages

exec(open('image_alignment/version.py').read())


dependencies = [
    'numpy',
    'scipy',
    'scikit-image',
]

setup(
    name='image-alignment',
    version=__version__,
    description='Python implementation of forward-additive Lucas-Kanade image alignment',
    packages=find_packages(include=['image_alignment', 'image_alignment.*']),
    install_requires=dependencies,
    extras_require={'test': ['pytest']},
)
