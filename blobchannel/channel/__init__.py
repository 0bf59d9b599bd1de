"""
Chunked, retrying, resumable read channels.

Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
"""

from blobchannel.channel.read_channel import BlobReadChannel, open_channel
from blobchannel.channel.state import CapturedState, capture, restore, dumps, loads
from blobchannel.channel.channel_file import ReadChannelFile
