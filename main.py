from rich.pretty import pprint

from linescript import *

__prog__ = "diagnostics.script"

source = """
# collect node diagnostics
OUTPUT path:'out/bundle.tar.gz'
WORKDIR $HOME
FROM 10.0.0.4:22
COPY '/var/log/syslog /var/log/kern.log'
CAPTURE 'df -h'
RUN cmd:"journalctl --since today"
"""


if __name__ == '__main__':
    pprint(parse(source, name=__prog__, shell=True, fancy=True))
