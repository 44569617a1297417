from setuptools import find_packages, setup

setup(
    name='sshmanager',
    version='1.0.0',
    description='Desktop front end for SSH keys, known hosts, port forwarding and connections',
    packages=find_packages(include=['sshmanager', 'sshmanager.*']),
    python_requires='>=3.8',
    install_requires=[
        'psutil',
    ],
    extras_require={
        # PyGObject needs the GTK4 and libadwaita system libraries
        'gui': ['PyGObject'],
        'test': ['pytest'],
    },
    entry_points={
        'gui_scripts': [
            'sshmanager=sshmanager.main:main',
        ],
    },
)
