from .requester import main

main()
