from devserve.main import main

main()
